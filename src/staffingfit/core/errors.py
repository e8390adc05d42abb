"""Typed validation errors raised by the engine."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError


class InvalidInputError(ValueError):
    """Raised when an input value is outside its allowed domain.

    ``field`` is a dotted path to the offending value (``skills.0.proficiency``).
    """

    def __init__(self, field: str, message: str, *, value: Any = None) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
        self.value = value

    @classmethod
    def from_validation_error(
        cls,
        exc: ValidationError,
        *,
        prefix: str | None = None,
    ) -> "InvalidInputError":
        errors = exc.errors()
        if not errors:
            return cls(prefix or "input", str(exc))
        first = errors[0]
        path = ".".join(str(part) for part in first.get("loc", ()))
        if prefix:
            path = f"{prefix}.{path}" if path else prefix
        error = cls(path or "input", first.get("msg", "invalid value"), value=first.get("input"))
        error.__cause__ = exc
        return error
