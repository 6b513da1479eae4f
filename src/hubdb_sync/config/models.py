"""Pydantic models for account configuration."""

from pydantic import BaseModel, Field, model_validator

DEFAULT_BASE_URL = "https://api.hubapi.com"


class AccountProfile(BaseModel):
    """Account profile from hubdb.toml.

    Exactly one credential is used: ``access_token`` takes precedence over
    ``api_key``.
    """

    account_id: int
    access_token: str | None = None
    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    description: str = ""

    @model_validator(mode="after")
    def _require_credential(self) -> "AccountProfile":
        if not self.access_token and not self.api_key:
            raise ValueError(
                f"Account {self.account_id} needs an access_token or api_key"
            )
        return self

    @property
    def auth_method(self) -> str:
        """Name of the credential in use."""
        return "access_token" if self.access_token else "api_key"


class HubDbConfig(BaseModel):
    """Complete account configuration from hubdb.toml."""

    accounts: dict[str, AccountProfile] = Field(default_factory=dict)
    default_account: str | None = None
