from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Union
from urllib.parse import urlparse

from kiota_authentication_azure.azure_identity_authentication_provider import (
    AzureIdentityAuthenticationProvider,
)
from msgraph import GraphServiceClient
from msgraph.graph_request_adapter import GraphRequestAdapter
from msgraph_beta import GraphServiceClient as BetaGraphServiceClient
from msgraph_beta.graph_request_adapter import (
    GraphRequestAdapter as BetaGraphRequestAdapter,
)

from graphmagic.auth.config import ApiVersion

if TYPE_CHECKING:
    from azure.core.credentials import TokenCredential

logger = logging.getLogger(__name__)

AnyGraphServiceClient = Union[GraphServiceClient, BetaGraphServiceClient]


def client_type(version: ApiVersion) -> type:
    """Return the Graph client class used for ``version``."""
    match version:
        case ApiVersion.V1:
            return GraphServiceClient
        case ApiVersion.BETA:
            return BetaGraphServiceClient
    raise ValueError(f"Unknown API version: {version!r}")


def build_graph_client(
    credential: "TokenCredential",
    scopes: Iterable[str],
    base_url: str,
    version: ApiVersion,
) -> AnyGraphServiceClient:
    """Build a Graph service client for ``version`` rooted at ``base_url``.

    The request adapter gets its base URL before the client is created so the
    client's path parameters point at the chosen national cloud. Nothing is
    sent until the first request.

    Args:
        credential: Token provider handed over to the client.
        scopes: Scopes requested for every token.
        base_url: Graph service root, e.g. ``https://graph.microsoft.us/beta``.
        version: Selects the v1.0 or beta SDK.

    Returns:
        A ready ``msgraph`` or ``msgraph_beta`` ``GraphServiceClient``.
    """
    host = urlparse(base_url).hostname
    auth_provider = AzureIdentityAuthenticationProvider(
        credential, scopes=list(scopes), allowed_hosts=[host]
    )

    match version:
        case ApiVersion.V1:
            adapter = GraphRequestAdapter(auth_provider)
        case ApiVersion.BETA:
            adapter = BetaGraphRequestAdapter(auth_provider)
        case _:
            raise ValueError(f"Unknown API version: {version!r}")

    adapter.base_url = base_url
    client = client_type(version)(request_adapter=adapter)
    logger.debug("Built %s client for %s", version.value, base_url)
    return client
