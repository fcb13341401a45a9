"""Okapi gateway configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import SettingsSource, read_setting
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_FOLIO_HOST = "localhost"
DEFAULT_FOLIO_PORT = "9130"
DEFAULT_FOLIO_PROTOCOL = "http:"
DEFAULT_FOLIO_TENANT = "diku"
DEFAULT_FOLIO_USERNAME = "diku_admin"
DEFAULT_FOLIO_PASSWORD = "admin"  # noqa: S105
OKAPI_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class Credentials:
    """Login credentials for the Okapi gateway."""

    username: str
    password: str
    tenant: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, tenant={self.tenant!r})"


@dataclass(frozen=True, slots=True)
class OkapiConfig:
    """Holds Okapi connection configuration values."""

    host: str
    port: str
    protocol: str
    credentials: Credentials
    resilience: ResilienceConfig

    @property
    def tenant(self) -> str:
        return self.credentials.tenant

    @property
    def base_url(self) -> str:
        return build_base_url(self.protocol, self.host, self.port)


def build_base_url(protocol: str, host: str, port: str) -> str:
    scheme = protocol.rstrip(":/") or "http"
    if port:
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def get_okapi_config(
    *,
    source: SettingsSource | None = None,
    resilience: ResilienceConfig | None = None,
) -> OkapiConfig:
    host = read_setting("FOLIO_HOST", DEFAULT_FOLIO_HOST, source=source)
    port = read_setting("FOLIO_PORT", DEFAULT_FOLIO_PORT, source=source)
    protocol = read_setting("FOLIO_PROTOCOL", DEFAULT_FOLIO_PROTOCOL, source=source)
    credentials = Credentials(
        username=read_setting("FOLIO_USERNAME", DEFAULT_FOLIO_USERNAME, source=source),
        password=read_setting("FOLIO_PASSWORD", DEFAULT_FOLIO_PASSWORD, source=source),
        tenant=read_setting("FOLIO_TENANT", DEFAULT_FOLIO_TENANT, source=source),
    )
    return OkapiConfig(
        host=host,
        port=port,
        protocol=protocol,
        credentials=credentials,
        resilience=resilience
        or ResilienceConfig(
            name="okapi",
            base_url=build_base_url(protocol, host, port),
            timeout_seconds=OKAPI_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
            default_headers={"Accept": "application/json, text/plain"},
        ),
    )
