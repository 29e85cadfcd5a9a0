"""Catalog domain exceptions."""

from __future__ import annotations

from typing import Iterable


class BookNotFound(Exception):
    """One or more ISBNs do not exist in the catalog (or were soft-deleted)."""

    def __init__(self, isbns: Iterable[str]) -> None:
        self.isbns = sorted(isbns)
        super().__init__(f"Book(s) not found: {', '.join(self.isbns)}.")
