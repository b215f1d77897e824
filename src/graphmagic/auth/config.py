from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError as PydanticValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from graphmagic.errors import ConfigLoadError, UnsupportedFlowError

logger = logging.getLogger(__name__)


def _normalise(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch not in "-_ ")


class _Choice(str, Enum):
    """String enum that parses loosely from magic arguments."""

    @property
    def aliases(self) -> tuple[str, ...]:
        return (self.name, self.value)

    @classmethod
    def parse(cls, value: object, option: str) -> "_Choice":
        """Return the member matching ``value``, ignoring case, ``-``, ``_`` and spaces.

        Raises:
            UnsupportedFlowError: If no member matches.
        """
        if isinstance(value, cls):
            return value
        wanted = _normalise(str(value))
        for member in cls:
            if any(_normalise(alias) == wanted for alias in member.aliases):
                return member
        raise UnsupportedFlowError(option, value, [m.value for m in cls])


class AuthenticationFlow(_Choice):
    """Supported Microsoft Entra ID sign-in flows."""

    INTERACTIVE_BROWSER = "InteractiveBrowser"
    DEVICE_CODE = "DeviceCode"
    CLIENT_SECRET = "ClientSecret"


class NationalCloud(_Choice):
    """Sovereign deployments of Entra ID and Microsoft Graph."""

    GLOBAL = "Global"
    US_GOVERNMENT = "UsGovernment"
    US_GOVERNMENT_DOD = "UsGovernmentDoD"
    CHINA = "China"
    GERMANY = "Germany"


class ApiVersion(_Choice):
    """Microsoft Graph API versions."""

    V1 = "V1"
    BETA = "Beta"

    @property
    def segment(self) -> str:
        """Path segment of the version in the Graph service root."""
        return "v1.0" if self is ApiVersion.V1 else "beta"

    @property
    def aliases(self) -> tuple[str, ...]:
        return (self.name, self.value, self.segment)


class CredentialOptions(BaseModel):
    """Resolved credential inputs for one invocation.

    Unset fields stay ``None``; blank strings are treated as unset.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    client_id: str | None = None
    tenant_id: str | None = None
    client_secret: SecretStr | None = None
    config_file: Path | None = None

    @field_validator("client_id", "tenant_id", "client_secret", mode="before")
    @classmethod
    def _blank_is_unset(cls, v: object) -> object:
        raw = v.get_secret_value() if isinstance(v, SecretStr) else v
        if isinstance(raw, str) and not raw.strip():
            return None
        return v


class CredentialFile(BaseModel):
    """JSON document holding any of ``clientId``, ``tenantId`` and ``clientSecret``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    client_id: str | None = Field(default=None, alias="clientId")
    tenant_id: str | None = Field(default=None, alias="tenantId")
    client_secret: SecretStr | None = Field(default=None, alias="clientSecret")


def load_config_file(path: str | Path) -> CredentialFile:
    """Read and parse a credential config file.

    Args:
        path: Location of the JSON document.

    Returns:
        The parsed :class:`CredentialFile`.

    Raises:
        ConfigLoadError: If the file does not exist, cannot be read, is not
            valid JSON, is not an object or holds non-string values.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigLoadError(path, "file does not exist")
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(path, str(exc)) from exc

    try:
        loaded = CredentialFile.model_validate_json(raw)
    except PydanticValidationError as exc:
        reason = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'document'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigLoadError(path, reason) from exc

    logger.debug("Loaded credential config file %s", path)
    return loaded


def _first(explicit, fallback):
    return explicit if explicit is not None else fallback


def merge_options(
    explicit: CredentialOptions, config_file: str | Path | None = None
) -> CredentialOptions:
    """Merge explicit options with values read from a config file.

    Explicit values always win; file values only fill fields left unset.

    Args:
        explicit: Options passed to the magic.
        config_file: Config file to read. Defaults to ``explicit.config_file``.

    Returns:
        A new :class:`CredentialOptions`.
    """
    path = config_file if config_file is not None else explicit.config_file
    if path is None:
        return explicit

    loaded = load_config_file(path)
    return CredentialOptions(
        client_id=_first(explicit.client_id, loaded.client_id),
        tenant_id=_first(explicit.tenant_id, loaded.tenant_id),
        client_secret=_first(explicit.client_secret, loaded.client_secret),
        config_file=Path(path),
    )


class MagicSettings(BaseSettings):
    """Defaults for the ``%microsoftgraph`` magic.

    Read from environment variables prefixed with ``GRAPHMAGIC_`` (e.g.,
    ``GRAPHMAGIC_NATIONAL_CLOUD=China``). Credentials are deliberately not
    part of these settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="GRAPHMAGIC_",
        case_sensitive=False,
        extra="ignore",
    )

    scope_name: str = "graph_client"
    authentication_flow: AuthenticationFlow = AuthenticationFlow.INTERACTIVE_BROWSER
    national_cloud: NationalCloud = NationalCloud.GLOBAL
    api_version: ApiVersion = ApiVersion.V1
    redirect_uri: str = "http://localhost:8400"
    device_code_timeout: int = Field(default=300, gt=0)

    @field_validator("authentication_flow", mode="before")
    @classmethod
    def _parse_flow(cls, v: object) -> AuthenticationFlow:
        return AuthenticationFlow.parse(v, "authentication_flow")

    @field_validator("national_cloud", mode="before")
    @classmethod
    def _parse_cloud(cls, v: object) -> NationalCloud:
        return NationalCloud.parse(v, "national_cloud")

    @field_validator("api_version", mode="before")
    @classmethod
    def _parse_version(cls, v: object) -> ApiVersion:
        return ApiVersion.parse(v, "api_version")
