"""Invocation pipeline behind ``%microsoftgraph``.

``connect`` runs merge → validate → credential → endpoint → client → bind.
Any failure aborts before :meth:`Bindings.bind`, so the namespace is only
touched by a fully assembled client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, MutableMapping

from pydantic import SecretStr

from .auth.config import (
    ApiVersion,
    AuthenticationFlow,
    CredentialOptions,
    MagicSettings,
    NationalCloud,
    merge_options,
)
from .auth.factory import DevicePrompt, get_credential, sign_in
from .auth.scopes import resolve
from .auth.validation import check_options, check_scope_name
from .graph.client import build_graph_client, client_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientBinding:
    """A client bound into a namespace under ``name``."""

    name: str
    client: Any
    declared_type: type


class Bindings:
    """Named values visible to later notebook cells.

    Wraps the target namespace (IPython's ``user_ns``). Binding a name that
    already exists replaces it; earlier values are not kept.
    """

    def __init__(self, namespace: MutableMapping[str, Any] | None = None) -> None:
        self._namespace = namespace if namespace is not None else {}
        self._bindings: dict[str, ClientBinding] = {}

    def bind(self, name: str, value: Any, declared_type: type) -> ClientBinding:
        binding = ClientBinding(name=name, client=value, declared_type=declared_type)
        if name in self._namespace:
            logger.info("Replacing existing binding %r", name)
        self._namespace[name] = value
        self._bindings[name] = binding
        return binding

    def get_binding(self, name: str) -> ClientBinding | None:
        return self._bindings.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._namespace

    def __getitem__(self, name: str) -> Any:
        return self._namespace[name]


@dataclass(frozen=True)
class ConnectRequest:
    """Parsed ``%microsoftgraph`` arguments with defaults applied."""

    options: CredentialOptions
    scope_name: str
    flow: AuthenticationFlow
    cloud: NationalCloud
    version: ApiVersion

    @classmethod
    def from_arguments(
        cls,
        *,
        client_id: str | None = None,
        tenant_id: str | None = None,
        client_secret: str | None = None,
        config_file: str | None = None,
        scope_name: str | None = None,
        authentication_flow: str | None = None,
        national_cloud: str | None = None,
        api_version: str | None = None,
        settings: MagicSettings | None = None,
    ) -> "ConnectRequest":
        """Build a request from raw option strings; ``None`` means use the default.

        Raises:
            UnsupportedFlowError: If a flow, cloud or version is not recognised.
        """
        cfg = settings or MagicSettings()
        return cls(
            options=CredentialOptions(
                client_id=client_id,
                tenant_id=tenant_id,
                client_secret=SecretStr(client_secret) if client_secret else None,
                config_file=Path(config_file) if config_file else None,
            ),
            scope_name=scope_name or cfg.scope_name,
            flow=(
                AuthenticationFlow.parse(authentication_flow, "--authentication-flow")
                if authentication_flow
                else cfg.authentication_flow
            ),
            cloud=(
                NationalCloud.parse(national_cloud, "--national-cloud")
                if national_cloud
                else cfg.national_cloud
            ),
            version=(
                ApiVersion.parse(api_version, "--api-version")
                if api_version
                else cfg.api_version
            ),
        )


def connect(
    request: ConnectRequest,
    bindings: Bindings,
    *,
    settings: MagicSettings | None = None,
    prompt: DevicePrompt | None = None,
) -> ClientBinding:
    """Authenticate and bind a Graph client for ``request``.

    Args:
        request: What to connect to and how.
        bindings: Namespace receiving the client.
        settings: Magic settings; read from the environment when ``None``.
        prompt: Device code callback, see :func:`get_credential`.

    Returns:
        The new :class:`ClientBinding`.

    Raises:
        ConfigLoadError: The config file could not be read.
        ValidationError: Required inputs are missing or the name is invalid.
        UnsupportedFlowError: The flow is not implemented.
        CredentialConstructionError: Credential creation or sign-in failed.
    """
    cfg = settings or MagicSettings()

    options = merge_options(request.options)
    result = check_options(options, request.flow) + check_scope_name(request.scope_name)
    result.raise_for_violations()

    credential = get_credential(
        request.flow, options, request.cloud, settings=cfg, prompt=prompt
    )
    endpoint = resolve(request.cloud, request.version)
    sign_in(credential, request.flow, endpoint.scopes)

    client = build_graph_client(
        credential, endpoint.scopes, endpoint.base_url, request.version
    )
    binding = bindings.bind(request.scope_name, client, client_type(request.version))
    logger.info(
        "Bound %s Graph client %r (%s)",
        request.version.value,
        request.scope_name,
        endpoint.base_url,
    )
    return binding
