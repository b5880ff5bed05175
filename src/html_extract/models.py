"""Pydantic models for extraction schemas and the fetch engine."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from html_extract.pipeline import Pipeline, compile_transform

SelectorType = Literal["xpath", "css"]
ProxyType = Literal["http", "https", "socks4", "socks5"]


class ExtractionField(BaseModel):
    """How one schema field is located, read and transformed."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    selector: str = Field(description="XPath expression or CSS selector")
    type: SelectorType = Field(default="xpath", description="Selector kind")
    attribute: Optional[str] = Field(
        default=None,
        description="Attribute to read from the matched element",
    )
    multiple: bool = Field(default=False, description="Collect every match")
    raw: bool = Field(
        default=False,
        description="Return the element markup instead of its text (wins over attribute)",
    )
    transform: Optional[Pipeline] = Field(
        default=None,
        description="Transform spec, compiled into a Pipeline on validation",
    )

    @field_validator("transform", mode="before")
    @classmethod
    def _compile_transform(cls, value: Any) -> Optional[Pipeline]:
        if value is None:
            return None
        return compile_transform(value)

    def empty_value(self) -> Any:
        """Value recorded when the field cannot be extracted."""
        return [] if self.multiple else None


class PaginationPage(BaseModel):
    """One link in a pagination control."""

    href: str
    text: str


class ProxyConfig(BaseModel):
    url: str = Field(description="Proxy URL, e.g. http://proxy.example.com:8080")
    type: Optional[ProxyType] = Field(
        default=None,
        description="Proxy protocol; detected from the URL scheme when unset",
    )
    username: Optional[str] = None
    password: Optional[str] = None

    @field_validator("url")
    @classmethod
    def _url_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Proxy URL cannot be empty")
        return value.strip()


class RetryOnErrors(BaseModel):
    """Which transient failure kinds are retried automatically."""

    ssl: bool = False
    timeout: bool = True
    dns: bool = True
    connection_refused: bool = True


class FetchOptions(BaseModel):
    timeout: float = Field(default=10.0, description="Per-attempt timeout in seconds")
    headers: dict[str, str] = Field(default_factory=dict)
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    use_random_user_agent: bool = False
    proxy: Optional[ProxyConfig] = None
    retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1.0, ge=0, description="Seconds between attempts")
    verbose: bool = False
    reject_unauthorized: bool = True
    ignore_ssl_errors: bool = False
    disable_server_identity_check: bool = False
    max_redirects: int = Field(default=5, ge=0)
    retry_on_errors: RetryOnErrors = Field(default_factory=RetryOnErrors)


class FetchResponse(BaseModel):
    """HTML body plus response metadata."""

    data: str
    headers: dict[str, str] = Field(default_factory=dict)
    status: int
    status_text: str = ""
