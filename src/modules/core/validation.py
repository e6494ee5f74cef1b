"""Helpers that turn validation failures into field -> messages maps."""

from __future__ import annotations

from typing import Dict, List

from pydantic import ValidationError


def pydantic_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Flatten a pydantic ``ValidationError`` into ``{"field.path": [msg, ...]}``.

    Nested locations are joined with dots (``items.0.size``); errors that
    belong to the whole model are reported under ``non_field_errors``.
    """
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Invalid value.")
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        errors.setdefault(loc or "non_field_errors", []).append(message)
    return errors
