"""Credential selection for Microsoft Graph clients.

Public API:
- merge_options() → CredentialOptions (explicit values over config file)
- validate_options() / check_options() (per-flow required fields)
- resolve() → Endpoint (national cloud × API version)
- get_credential() → TokenCredential, sign_in()
- AuthenticationFlow, NationalCloud, ApiVersion (enums)
- MagicSettings (defaults for the magic)
"""

from .config import (
    ApiVersion,
    AuthenticationFlow,
    CredentialOptions,
    MagicSettings,
    NationalCloud,
    merge_options,
)
from .factory import get_credential, sign_in
from .scopes import COMMON_TENANT, Endpoint, authority_for, resolve
from .validation import ValidationResult, Violation, check_options, validate_options

__all__ = [
    "ApiVersion",
    "AuthenticationFlow",
    "COMMON_TENANT",
    "CredentialOptions",
    "Endpoint",
    "MagicSettings",
    "NationalCloud",
    "ValidationResult",
    "Violation",
    "authority_for",
    "check_options",
    "get_credential",
    "merge_options",
    "resolve",
    "sign_in",
    "validate_options",
]
