from __future__ import annotations

import logging
import sys
from datetime import datetime

import msgraph
from IPython.core.magic import Magics, line_magic, magics_class
from IPython.core.magic_arguments import argument, magic_arguments, parse_argstring

from .auth.config import ApiVersion, AuthenticationFlow, MagicSettings, NationalCloud
from .command import Bindings, ClientBinding, ConnectRequest, connect
from .errors import GraphMagicError, ValidationError

logger = logging.getLogger(__name__)


def _choices(enum_cls) -> str:
    return ", ".join(member.value for member in enum_cls)


def _print_device_code(verification_uri: str, user_code: str, expires_on: datetime) -> None:
    print(
        f"To sign in, open {verification_uri} and enter the code {user_code} "
        f"(expires {expires_on:%H:%M:%S})."
    )


@magics_class
class GraphMagics(Magics):
    """Provides ``%microsoftgraph``."""

    def __init__(self, shell, settings: MagicSettings | None = None) -> None:
        super().__init__(shell)
        self.settings = settings or MagicSettings()
        self.bindings = Bindings(shell.user_ns)

    @magic_arguments()
    @argument(
        "--client-id",
        help="Application (client) ID registered in Microsoft Entra ID.",
    )
    @argument(
        "--tenant-id",
        help="Directory (tenant) ID. Interactive flows default to 'common'.",
    )
    @argument(
        "--client-secret",
        help="Application (client) secret registered in Microsoft Entra ID.",
    )
    @argument(
        "--config-file",
        help=(
            "JSON file containing any of clientId, tenantId and clientSecret. "
            "Values are only used when the matching option is not passed."
        ),
    )
    @argument(
        "--scope-name",
        help="Variable name for the Graph client (default: graph_client).",
    )
    @argument(
        "--authentication-flow",
        help=f"Authentication flow: {_choices(AuthenticationFlow)}.",
    )
    @argument(
        "--national-cloud",
        help=f"National cloud: {_choices(NationalCloud)}.",
    )
    @argument(
        "--api-version",
        help=f"Microsoft Graph API version: {_choices(ApiVersion)}.",
    )
    @line_magic
    def microsoftgraph(self, line: str = "") -> None:
        """Sign in to Microsoft Entra ID and bind a Microsoft Graph client."""
        args = parse_argstring(self.microsoftgraph, line)
        self.run(
            client_id=args.client_id,
            tenant_id=args.tenant_id,
            client_secret=args.client_secret,
            config_file=args.config_file,
            scope_name=args.scope_name,
            authentication_flow=args.authentication_flow,
            national_cloud=args.national_cloud,
            api_version=args.api_version,
        )

    def run(self, **arguments: str | None) -> ClientBinding | None:
        """Connect and report the outcome to the notebook.

        Returns:
            The binding, or ``None`` when a :class:`GraphMagicError` was
            reported.
        """
        try:
            request = ConnectRequest.from_arguments(settings=self.settings, **arguments)
            binding = connect(
                request,
                self.bindings,
                settings=self.settings,
                prompt=_print_device_code,
            )
        except ValidationError as exc:
            print(f"INVALID INPUT: {exc}", file=sys.stderr)
            return None
        except GraphMagicError as exc:
            logger.debug("%microsoftgraph failed", exc_info=True)
            print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
            return None

        print(f"Graph client declared with name: {binding.name}")
        return binding


def register(shell, settings: MagicSettings | None = None) -> GraphMagics:
    """Register ``%microsoftgraph`` with ``shell`` and return the magics instance.

    Also makes the ``msgraph`` package available in the user namespace.
    """
    magics = GraphMagics(shell, settings=settings)
    shell.register_magics(magics)
    shell.push({"msgraph": msgraph})
    return magics
