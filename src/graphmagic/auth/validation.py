"""Checks that resolved credential options are sufficient for a sign-in flow."""

from __future__ import annotations

import keyword
import logging
from dataclasses import dataclass
from typing import Final, Mapping

from graphmagic.errors import ValidationError

from .config import AuthenticationFlow, CredentialOptions
from .tables import ensure_complete

logger = logging.getLogger(__name__)

# Magic option for each validated field, used in messages.
OPTION_NAMES: Final[Mapping[str, str]] = {
    "client_id": "--client-id",
    "tenant_id": "--tenant-id",
    "client_secret": "--client-secret",
    "scope_name": "--scope-name",
}

REQUIRED_FIELDS: Final[Mapping[AuthenticationFlow, tuple[str, ...]]] = ensure_complete(
    {
        # tenant_id falls back to the multi-tenant "common" authority.
        AuthenticationFlow.INTERACTIVE_BROWSER: ("client_id",),
        AuthenticationFlow.DEVICE_CODE: ("client_id",),
        AuthenticationFlow.CLIENT_SECRET: ("client_id", "tenant_id", "client_secret"),
    },
    AuthenticationFlow,
)


@dataclass(frozen=True)
class Violation:
    """A single unmet requirement."""

    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Ordered violations found by :func:`check_options`; truthy when empty."""

    violations: tuple[Violation, ...] = ()

    def __bool__(self) -> bool:
        return not self.violations

    @property
    def missing(self) -> tuple[str, ...]:
        return tuple(v.field for v in self.violations)

    def __add__(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.violations + other.violations)

    def raise_for_violations(self) -> None:
        if self.violations:
            raise ValidationError(self.violations)


def _missing(field: str, flow: AuthenticationFlow) -> Violation:
    return Violation(
        field=field,
        message=(
            f"{field} ({OPTION_NAMES[field]}) is required for the "
            f"{flow.value} authentication flow"
        ),
    )


def check_options(
    options: CredentialOptions, flow: AuthenticationFlow
) -> ValidationResult:
    """Collect every required field that ``options`` leaves unset for ``flow``.

    Fields the flow does not need are ignored even when set.
    """
    violations = tuple(
        _missing(field, flow)
        for field in REQUIRED_FIELDS[flow]
        if getattr(options, field) is None
    )
    return ValidationResult(violations)


def validate_options(options: CredentialOptions, flow: AuthenticationFlow) -> None:
    """Raise :class:`ValidationError` listing all missing fields for ``flow``."""
    result = check_options(options, flow)
    if not result:
        logger.debug("Missing fields for %s: %s", flow.value, ", ".join(result.missing))
    result.raise_for_violations()


def check_scope_name(name: str) -> ValidationResult:
    """Check that the binding name can be used as a Python variable."""
    if name.isidentifier() and not keyword.iskeyword(name):
        return ValidationResult()
    return ValidationResult(
        (
            Violation(
                field="scope_name",
                message=(
                    f"scope_name ({OPTION_NAMES['scope_name']}) must be a valid "
                    f"Python identifier, got {name!r}"
                ),
            ),
        )
    )
