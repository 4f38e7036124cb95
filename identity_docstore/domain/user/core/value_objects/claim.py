"""Claim value object."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Claim(BaseModel):
    """
    Claim value object (type + value pair).

    Example:
        >>> claim = Claim(type="role", value="admin")
        >>> claim.type
        'role'
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1, description="Claim type")
    value: str = Field(..., description="Claim value")

    def __str__(self) -> str:
        """String representation."""
        return f"{self.type}: {self.value}"

    def __repr__(self) -> str:
        """Debug representation."""
        return f"Claim('{self.type}', '{self.value}')"
