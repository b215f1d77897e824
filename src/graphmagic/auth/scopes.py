from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Mapping

from .config import ApiVersion, NationalCloud
from .tables import ensure_complete

COMMON_TENANT: Final[str] = "common"

AUTHORITY_HOSTS: Final[Mapping[NationalCloud, str]] = ensure_complete(
    {
        NationalCloud.GLOBAL: "login.microsoftonline.com",
        NationalCloud.US_GOVERNMENT: "login.microsoftonline.us",
        NationalCloud.US_GOVERNMENT_DOD: "login.microsoftonline.us",
        NationalCloud.CHINA: "login.chinacloudapi.cn",
        NationalCloud.GERMANY: "login.microsoftonline.de",
    },
    NationalCloud,
)

GRAPH_HOSTS: Final[Mapping[NationalCloud, str]] = ensure_complete(
    {
        NationalCloud.GLOBAL: "https://graph.microsoft.com",
        NationalCloud.US_GOVERNMENT: "https://graph.microsoft.us",
        NationalCloud.US_GOVERNMENT_DOD: "https://dod-graph.microsoft.us",
        NationalCloud.CHINA: "https://microsoftgraph.chinacloudapi.cn",
        NationalCloud.GERMANY: "https://graph.microsoft.de",
    },
    NationalCloud,
)


@dataclass(frozen=True)
class Endpoint:
    """Graph service root and the scopes to request for it."""

    base_url: str
    scopes: tuple[str, ...]


def default_scopes(cloud: NationalCloud) -> tuple[str, ...]:
    """Return the ``/.default`` scope of the cloud's Graph host."""
    return (f"{GRAPH_HOSTS[cloud]}/.default",)


ENDPOINTS: Final[Mapping[tuple[NationalCloud, ApiVersion], Endpoint]] = ensure_complete(
    {
        (cloud, version): Endpoint(
            base_url=f"{GRAPH_HOSTS[cloud]}/{version.segment}",
            scopes=default_scopes(cloud),
        )
        for cloud in NationalCloud
        for version in ApiVersion
    },
    NationalCloud,
    ApiVersion,
)


def resolve(cloud: NationalCloud, version: ApiVersion) -> Endpoint:
    """Return the Graph endpoint for ``cloud`` and ``version``.

    Args:
        cloud: National cloud hosting the tenant.
        version: Graph API version.

    Returns:
        The matching :class:`Endpoint`. Lookups never touch the network.
    """
    return ENDPOINTS[(cloud, version)]


def authority_for(cloud: NationalCloud) -> str:
    """Return the Entra ID authority host for ``cloud``."""
    return AUTHORITY_HOSTS[cloud]
