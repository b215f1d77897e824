"""Exceptions raised while preparing a Microsoft Graph client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .auth.validation import Violation


class GraphMagicError(Exception):
    """Base class for every error reported by the ``%microsoftgraph`` magic."""


class ConfigLoadError(GraphMagicError):
    """An explicitly requested config file is missing or malformed."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not load config file {path}: {reason}")


class ValidationError(GraphMagicError):
    """One or more inputs are missing or invalid for the chosen flow.

    All violations are collected before raising, so ``violations`` always
    holds the complete list rather than the first failure.
    """

    def __init__(self, violations: Iterable["Violation"]) -> None:
        self.violations = tuple(violations)
        details = "; ".join(v.message for v in self.violations)
        super().__init__(details)


class UnsupportedFlowError(GraphMagicError):
    """The requested flow, cloud or API version is not implemented."""

    def __init__(self, option: str, value: object, choices: Iterable[str]) -> None:
        self.option = option
        self.value = value
        self.choices = tuple(choices)
        super().__init__(
            f"Unsupported value {value!r} for {option}; "
            f"expected one of: {', '.join(self.choices)}."
        )


class CredentialConstructionError(GraphMagicError):
    """Building or signing in with the credential failed, timed out or was cancelled."""
