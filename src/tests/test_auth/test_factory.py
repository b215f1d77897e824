from __future__ import annotations

from typing import Any

import pytest
from azure.core.exceptions import ClientAuthenticationError

from graphmagic.auth.config import (
    AuthenticationFlow,
    CredentialOptions,
    MagicSettings,
    NationalCloud,
)
from graphmagic.auth.factory import get_credential, sign_in
from graphmagic.errors import CredentialConstructionError, UnsupportedFlowError


def test_factory_interactive_browser__defaults_to_common_tenant(
    stub_credentials: dict[str, Any],
) -> None:
    cred = get_credential(
        AuthenticationFlow.INTERACTIVE_BROWSER,
        CredentialOptions(client_id="c"),
        NationalCloud.GLOBAL,
    )

    klass = stub_credentials["InteractiveBrowserCredential"]
    assert isinstance(cred, klass)
    assert klass.call_count == 1
    assert klass.last_kwargs == {
        "tenant_id": "common",
        "client_id": "c",
        "authority": "login.microsoftonline.com",
        "redirect_uri": "http://localhost:8400",
    }


def test_factory_interactive_browser__explicit_tenant_and_redirect(
    stub_credentials: dict[str, Any],
) -> None:
    get_credential(
        AuthenticationFlow.INTERACTIVE_BROWSER,
        CredentialOptions(client_id="c", tenant_id="t"),
        NationalCloud.US_GOVERNMENT,
        settings=MagicSettings(redirect_uri="http://localhost:9000"),
    )

    kwargs = stub_credentials["InteractiveBrowserCredential"].last_kwargs
    assert kwargs["tenant_id"] == "t"
    assert kwargs["authority"] == "login.microsoftonline.us"
    assert kwargs["redirect_uri"] == "http://localhost:9000"


def test_factory_device_code__timeout_and_prompt(
    stub_credentials: dict[str, Any],
) -> None:
    def prompt(uri: str, code: str, expires_on: Any) -> None:  # pragma: no cover
        pass

    get_credential(
        AuthenticationFlow.DEVICE_CODE,
        CredentialOptions(client_id="c"),
        NationalCloud.CHINA,
        settings=MagicSettings(device_code_timeout=42),
        prompt=prompt,
    )

    klass = stub_credentials["DeviceCodeCredential"]
    assert klass.last_kwargs == {
        "tenant_id": "common",
        "client_id": "c",
        "authority": "login.chinacloudapi.cn",
        "timeout": 42,
        "prompt_callback": prompt,
    }


def test_factory_client_secret__unwraps_secret(
    stub_credentials: dict[str, Any],
) -> None:
    get_credential(
        AuthenticationFlow.CLIENT_SECRET,
        CredentialOptions(client_id="c", tenant_id="t", client_secret="sekrit"),
        NationalCloud.GERMANY,
    )

    klass = stub_credentials["ClientSecretCredential"]
    assert klass.call_count == 1
    assert klass.last_kwargs == {
        "tenant_id": "t",
        "client_id": "c",
        "client_secret": "sekrit",
        "authority": "login.microsoftonline.de",
    }


def test_factory__new_credential_per_call(stub_credentials: dict[str, Any]) -> None:
    options = CredentialOptions(client_id="c")
    first = get_credential(AuthenticationFlow.DEVICE_CODE, options, NationalCloud.GLOBAL)
    second = get_credential(AuthenticationFlow.DEVICE_CODE, options, NationalCloud.GLOBAL)
    assert first is not second
    assert stub_credentials["DeviceCodeCredential"].call_count == 2


def test_factory__unknown_flow_raises(stub_credentials: dict[str, Any]) -> None:
    with pytest.raises(UnsupportedFlowError, match="--authentication-flow"):
        get_credential("Password", CredentialOptions(), NationalCloud.GLOBAL)  # type: ignore[arg-type]


def test_factory__library_errors_are_wrapped(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    import graphmagic.auth.factory as factory

    def _reject(**kwargs: Any) -> None:
        raise ValueError("Invalid tenant id provided.")

    monkeypatch.setattr(factory, "ClientSecretCredential", _reject)
    with pytest.raises(CredentialConstructionError, match="Invalid tenant id") as info:
        get_credential(
            AuthenticationFlow.CLIENT_SECRET,
            CredentialOptions(client_id="c", tenant_id="bad tenant", client_secret="s"),
            NationalCloud.GLOBAL,
        )
    assert isinstance(info.value.__cause__, ValueError)


def test_sign_in__interactive_flows_authenticate(stub_credentials: dict[str, Any]) -> None:
    klass = stub_credentials["DeviceCodeCredential"]
    sign_in(klass(), AuthenticationFlow.DEVICE_CODE, ("https://graph.microsoft.com/.default",))
    assert klass.authenticated_scopes == ["https://graph.microsoft.com/.default"]


def test_sign_in__client_secret_is_lazy(stub_credentials: dict[str, Any]) -> None:
    klass = stub_credentials["ClientSecretCredential"]
    sign_in(klass(), AuthenticationFlow.CLIENT_SECRET, ("scope",))
    assert klass.authenticated_scopes is None


@pytest.mark.parametrize(
    "error, match",
    [
        (KeyboardInterrupt(), "cancelled"),
        (ClientAuthenticationError("timed out waiting for user"), "timed out"),
    ],
)
def test_sign_in__failures_become_construction_errors(
    stub_credentials: dict[str, Any], error: BaseException, match: str
) -> None:
    klass = stub_credentials["DeviceCodeCredential"]
    klass.authenticate_error = error

    with pytest.raises(CredentialConstructionError, match=match):
        sign_in(klass(), AuthenticationFlow.DEVICE_CODE, ("scope",))
