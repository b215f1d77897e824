from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Any, Iterator

import pytest


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove environment variables so GRAPHMAGIC_* settings do not leak in.

    Yields:
        Iterator[None]: Context manager semantics for pytest.
    """
    to_clear = [k for k in os.environ.keys() if k.startswith(("GRAPHMAGIC_", "AZURE_"))]
    for k in to_clear:
        monkeypatch.delenv(k, raising=False)
    yield


def _make_recorder(name: str) -> type:
    """Create a credential stand-in that records its init kwargs and sign-ins."""

    class _C:
        last_args: tuple[Any, ...] | None = None
        last_kwargs: dict[str, Any] | None = None
        call_count: int = 0
        authenticate_error: BaseException | None = None
        authenticated_scopes: list[str] | None = None

        def __init__(self, *args: Any, **kwargs: Any) -> None:
            type(self).last_args = args
            type(self).last_kwargs = dict(kwargs)
            type(self).call_count += 1

        def authenticate(self, *, scopes: list[str] | None = None, **kwargs: Any):
            type(self).authenticated_scopes = scopes
            if type(self).authenticate_error is not None:
                raise type(self).authenticate_error
            return None

        def get_token(self, *scopes: str, **kwargs: Any):  # pragma: no cover
            raise AssertionError("tests must not request tokens")

    _C.__name__ = name
    _C.__qualname__ = name
    return _C


@pytest.fixture()
def stub_credentials(monkeypatch: pytest.MonkeyPatch) -> dict[str, type]:
    """Replace the azure-identity credentials used by the factory with recorders.

    Returns:
        dict[str, type]: Recorder classes keyed by credential class name.
    """
    import graphmagic.auth.factory as factory

    names = [
        "InteractiveBrowserCredential",
        "DeviceCodeCredential",
        "ClientSecretCredential",
    ]
    recorders = {n: _make_recorder(n) for n in names}
    for n, cls in recorders.items():
        monkeypatch.setattr(factory, n, cls)
    return recorders


class FakeShell(SimpleNamespace):
    """Just enough of an IPython shell for registering magics."""

    def __init__(self) -> None:
        super().__init__(user_ns={}, registered=[])
        self.magics_manager = SimpleNamespace(magics={"line": {}, "cell": {}})

    def register_magics(self, *objs: Any) -> None:
        for obj in objs:
            self.registered.append(obj)
            self.magics_manager.magics["line"].update(obj.magics["line"])

    def push(self, variables: dict[str, Any]) -> None:
        self.user_ns.update(variables)


@pytest.fixture()
def shell() -> FakeShell:
    return FakeShell()
