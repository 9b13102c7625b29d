from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from .errors import InvalidInputError

logger = logging.getLogger(__name__)


class Prompter:
    """Console prompts with defaults.

    With assume_defaults=True (unattended runs) no input is read and every
    prompt returns its default.
    """

    def __init__(
        self,
        *,
        assume_defaults: bool = False,
        input_fn: Optional[Callable[[str], str]] = None,
        max_attempts: int = 3,
    ) -> None:
        self.assume_defaults = assume_defaults
        self._input = input_fn or input
        self.max_attempts = max_attempts

    def _read(self, prompt: str) -> str:
        if self.assume_defaults:
            logger.debug("prompt %r answered with default", prompt)
            return ""
        return self._input(prompt).strip()

    def ask(self, question: str, default: str = "") -> str:
        suffix = f" ({default})" if default else ""
        answer = self._read(f"{question}{suffix}: ")
        return answer or default

    def confirm(self, question: str, default: bool = True) -> bool:
        hint = "[Y/n]" if default else "[y/N]"
        for _ in range(self.max_attempts):
            answer = self._read(f"{question} {hint} ").lower()
            if not answer:
                return default
            if answer in {"y", "yes"}:
                return True
            if answer in {"n", "no"}:
                return False
            print("Please answer y or n.")
        raise InvalidInputError(f"No valid answer to: {question}", remediation="answer y or n")

    def choose(self, question: str, choices: Sequence[str], default: str) -> str:
        """Pick one of choices; the first letter of each choice is also accepted.

        Invalid answers re-prompt; after max_attempts the run aborts.
        """

        by_key = {}
        for c in choices:
            by_key[c.lower()] = c
            by_key.setdefault(c[0].lower(), c)

        for _ in range(self.max_attempts):
            answer = self._read(f"{question} ").lower()
            if not answer:
                return default
            if answer in by_key:
                return by_key[answer]
            print(f"Please choose one of: {', '.join(choices)}.")
        raise InvalidInputError(
            f"No valid answer to: {question}",
            remediation=f"choose one of {', '.join(choices)}",
        )

    def pause(self, message: str = "Press enter to continue...") -> None:
        self._read(message)
