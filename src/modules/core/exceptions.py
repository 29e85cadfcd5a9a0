"""Exceptions shared across modules."""

from __future__ import annotations


class ImmutableRecordError(Exception):
    """An append-only record was updated or deleted after creation."""
