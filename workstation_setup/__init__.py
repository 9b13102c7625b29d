"""Workstation setup (Python-first, idempotent).

Core design goals:
- Every step checks before it acts
- Safe to re-run after a partial or full success
- Warnings collected and summarized at the end of a run
- Manifest-driven package and repository lists
- Centralized logging
"""

__all__ = []
