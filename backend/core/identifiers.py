"""Opaque identifier types used for ownership checks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserId:
    """Normalized user identifier.

    Ownership checks compare ``UserId`` values only. A ``UserId`` never equals
    a plain string, so a raw request value cannot satisfy an ownership test by
    coercion.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError("UserId value must be a string")
        normalized = self.value.strip()
        if not normalized:
            raise ValueError("UserId value must not be empty")
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value
