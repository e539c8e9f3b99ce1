import pytest
import requests
from conftest import DummyResponse, ScriptedSession

from skufinder.auth import acquire_token, token_url
from skufinder.config import Credentials
from skufinder.errors import AuthenticationError


def test_exchange_posts_client_credentials(credentials, feed_settings):
    session = ScriptedSession()
    assert acquire_token(session, credentials, feed_settings) == "tok"
    post = session.posts[0]
    assert post["url"] == token_url(feed_settings, "tenant") == "https://login.example/tenant/oauth2/v2.0/token"
    assert post["data"] == {
        "grant_type": "client_credentials",
        "client_id": "client",
        "client_secret": "secret",
        "scope": "https://mgmt.example/.default",
    }


def test_no_credentials_returns_none(feed_settings):
    session = ScriptedSession()
    assert acquire_token(session, Credentials(client_id="only-client"), feed_settings) is None
    assert session.posts == []


def test_error_description_is_surfaced(credentials, feed_settings):
    denied = DummyResponse({"error": "invalid_client", "error_description": "AADSTS7000215: bad secret"}, 401)
    with pytest.raises(AuthenticationError, match="AADSTS7000215"):
        acquire_token(ScriptedSession(token_response=denied), credentials, feed_settings)


def test_missing_token_or_transport_failure_raise(credentials, feed_settings):
    with pytest.raises(AuthenticationError):
        acquire_token(ScriptedSession(token_response=DummyResponse({"token_type": "Bearer"})), credentials, feed_settings)
    with pytest.raises(AuthenticationError):
        acquire_token(ScriptedSession(token_response=DummyResponse(ValueError("html"), 502)), credentials, feed_settings)
    with pytest.raises(AuthenticationError):
        acquire_token(ScriptedSession(token_response=requests.ConnectionError("dns")), credentials, feed_settings)
