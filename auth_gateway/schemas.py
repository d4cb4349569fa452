"""
OIDC client descriptor schema. Validates OIDC_CLIENTS and OIDC_CLIENTS_FILE entries
before anything is written to the registry.
"""
from typing import Any, Literal

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

# RFC 6749 client types; "public" clients use PKCE and carry no secret
ClientType = Literal["web", "native", "user-agent-based", "public"]

_url_adapter = TypeAdapter(AnyUrl)


class ClientDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    client_id: str = Field(alias="clientId", min_length=1)
    name: str = Field(min_length=1)
    redirect_urls: list[str] = Field(alias="redirectURLs", min_length=1)
    type: ClientType = "web"
    client_secret: str | None = Field(default=None, alias="clientSecret", min_length=1)
    skip_consent: bool = Field(default=False, alias="skipConsent")
    disabled: bool = False
    icon: str | None = None
    metadata: dict[str, Any] | None = None
    user_id: str | None = Field(default=None, alias="userId")

    @model_validator(mode="after")
    def _check_client(self) -> "ClientDescriptor":
        if not self.client_id.strip():
            raise ValueError("clientId cannot be empty")
        if not self.name.strip():
            raise ValueError("name cannot be empty")
        for url in self.redirect_urls:
            # Native clients use custom schemes (com.example.app://callback); AnyUrl accepts those
            try:
                _url_adapter.validate_python(url)
            except ValidationError:
                raise ValueError(f"Invalid redirect URL: {url}") from None
        if self.type != "public" and not self.client_secret:
            raise ValueError("clientSecret is required for non-public clients")
        return self

    @property
    def is_confidential(self) -> bool:
        return self.client_secret is not None
