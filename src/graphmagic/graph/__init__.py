from .client import build_graph_client, client_type

__all__ = ["build_graph_client", "client_type"]
