"""IPython extension providing authenticated Microsoft Graph clients.

Load it in a notebook with ``%load_ext graphmagic`` and run, for example::

    %microsoftgraph --client-id <app-id> --scope-name graph

The client is then available as ``graph`` in later cells.
"""

from .command import Bindings, ClientBinding, ConnectRequest, connect
from .errors import (
    ConfigLoadError,
    CredentialConstructionError,
    GraphMagicError,
    UnsupportedFlowError,
    ValidationError,
)

__all__ = [
    "Bindings",
    "ClientBinding",
    "ConfigLoadError",
    "ConnectRequest",
    "CredentialConstructionError",
    "GraphMagicError",
    "UnsupportedFlowError",
    "ValidationError",
    "connect",
    "load_ipython_extension",
    "unload_ipython_extension",
]


def load_ipython_extension(ipython) -> None:
    """Called by ``%load_ext graphmagic``."""
    from .magics import register

    register(ipython)


def unload_ipython_extension(ipython) -> None:
    """Called by ``%unload_ext graphmagic``."""
    ipython.magics_manager.magics["line"].pop("microsoftgraph", None)
