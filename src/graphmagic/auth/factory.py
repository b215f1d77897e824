from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Final, Iterable, Mapping

from azure.core.credentials import TokenCredential
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import (
    ClientSecretCredential,
    DeviceCodeCredential,
    InteractiveBrowserCredential,
)

from graphmagic.errors import CredentialConstructionError, UnsupportedFlowError

from .config import AuthenticationFlow, CredentialOptions, MagicSettings, NationalCloud
from .scopes import COMMON_TENANT, authority_for
from .tables import ensure_complete

logger = logging.getLogger(__name__)

DevicePrompt = Callable[[str, str, datetime], None]

# Flows that wait on the user and are signed in before the client is bound.
INTERACTIVE_FLOWS: Final[frozenset[AuthenticationFlow]] = frozenset(
    {AuthenticationFlow.INTERACTIVE_BROWSER, AuthenticationFlow.DEVICE_CODE}
)


def _interactive_browser(
    options: CredentialOptions,
    authority: str,
    settings: MagicSettings,
    prompt: DevicePrompt | None,
) -> TokenCredential:
    return InteractiveBrowserCredential(
        tenant_id=options.tenant_id or COMMON_TENANT,
        client_id=options.client_id,
        authority=authority,
        redirect_uri=settings.redirect_uri,
    )


def _device_code(
    options: CredentialOptions,
    authority: str,
    settings: MagicSettings,
    prompt: DevicePrompt | None,
) -> TokenCredential:
    return DeviceCodeCredential(
        tenant_id=options.tenant_id or COMMON_TENANT,
        client_id=options.client_id,
        authority=authority,
        timeout=settings.device_code_timeout,
        prompt_callback=prompt,
    )


def _client_secret(
    options: CredentialOptions,
    authority: str,
    settings: MagicSettings,
    prompt: DevicePrompt | None,
) -> TokenCredential:
    return ClientSecretCredential(
        tenant_id=options.tenant_id,
        client_id=options.client_id,
        client_secret=options.client_secret.get_secret_value(),
        authority=authority,
    )


_BUILDERS: Final[Mapping[AuthenticationFlow, Callable[..., TokenCredential]]] = (
    ensure_complete(
        {
            AuthenticationFlow.INTERACTIVE_BROWSER: _interactive_browser,
            AuthenticationFlow.DEVICE_CODE: _device_code,
            AuthenticationFlow.CLIENT_SECRET: _client_secret,
        },
        AuthenticationFlow,
    )
)


def get_credential(
    flow: AuthenticationFlow,
    options: CredentialOptions,
    cloud: NationalCloud,
    *,
    settings: MagicSettings | None = None,
    prompt: DevicePrompt | None = None,
) -> TokenCredential:
    """Construct the :class:`TokenCredential` for ``flow``.

    Options must already have passed
    :func:`graphmagic.auth.validation.validate_options`. Interactive flows
    fall back to the ``common`` tenant when no tenant is given.

    Args:
        flow: Sign-in flow.
        options: Validated credential options.
        cloud: National cloud whose authority is used.
        settings: Magic settings (redirect URI, device code timeout).
        prompt: Device code callback receiving ``(verification_uri, user_code,
            expires_on)``. ``None`` keeps the azure-identity default.

    Returns:
        A new credential. Nothing is cached between calls.

    Raises:
        UnsupportedFlowError: If ``flow`` is not a known flow.
        CredentialConstructionError: If azure-identity rejects the inputs.
    """
    try:
        builder = _BUILDERS[flow]
    except (KeyError, TypeError):
        raise UnsupportedFlowError(
            "--authentication-flow", flow, [f.value for f in AuthenticationFlow]
        ) from None

    cfg = settings or MagicSettings()
    authority = authority_for(cloud)
    try:
        credential = builder(options, authority, cfg, prompt)
    except (ValueError, TypeError) as exc:
        raise CredentialConstructionError(
            f"Could not create {flow.value} credential: {exc}"
        ) from exc

    logger.info("Created %s credential for %s", flow.value, authority)
    return credential


def sign_in(
    credential: TokenCredential,
    flow: AuthenticationFlow,
    scopes: Iterable[str],
) -> None:
    """Complete the user interaction for interactive flows.

    Blocks until the browser redirect completes or the device code is
    approved. Non-interactive flows return immediately and acquire tokens on
    first use.

    Raises:
        CredentialConstructionError: If sign-in fails, times out or is
            interrupted.
    """
    if flow not in INTERACTIVE_FLOWS:
        return

    logger.info("Waiting for %s sign-in", flow.value)
    try:
        credential.authenticate(scopes=list(scopes))
    except KeyboardInterrupt as exc:
        raise CredentialConstructionError(f"{flow.value} sign-in was cancelled") from exc
    except (ClientAuthenticationError, ValueError) as exc:
        raise CredentialConstructionError(f"{flow.value} sign-in failed: {exc}") from exc
