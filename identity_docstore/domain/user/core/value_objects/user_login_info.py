"""UserLoginInfo value object."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserLoginInfo(BaseModel):
    """
    External login value object.

    Identifies a credential issued by an external provider
    (provider name + the key that provider uses for the user).

    Example:
        >>> login = UserLoginInfo(login_provider="github", provider_key="42")
        >>> str(login)
        'github|42'
    """

    model_config = ConfigDict(frozen=True)

    login_provider: str = Field(..., min_length=1, description="External provider name")
    provider_key: str = Field(..., min_length=1, description="User key at the provider")

    @field_validator("login_provider", "provider_key")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject whitespace-only values."""
        if not v.strip():
            raise ValueError("Login provider and key cannot be blank")
        return v

    def __str__(self) -> str:
        """String representation."""
        return f"{self.login_provider}|{self.provider_key}"

    def __repr__(self) -> str:
        """Debug representation."""
        return f"UserLoginInfo('{self.login_provider}', '{self.provider_key}')"
