import pytest

from odds_client.catalog import PROVIDERS, get_provider
from odds_client.client import ProviderClient, ProviderError


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class DummySession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.requests.append({"method": method, "url": url, "headers": headers, "json": json, "timeout": timeout})
        return self.response


def test_catalog_keys_are_unique_and_resolvable():
    keys = [provider.key for provider in PROVIDERS]
    assert len(keys) == len(set(keys))
    assert get_provider("stake").title == "Stake"
    assert get_provider("unknown") is None


def test_fetch_posts_body_and_injects_token_from_environment():
    session = DummySession(DummyResponse(payload={"data": {}}))
    client = ProviderClient(session=session, timeout=5, environ={"STAKE_ACCESS_TOKEN": "secret"})

    assert client.fetch(get_provider("stake")) == {"data": {}}

    [request] = session.requests
    assert request["method"] == "POST"
    assert request["headers"]["x-access-token"] == "secret"
    assert request["json"]["operationName"] == "BetsBoard_HighrollerSportBets"
    assert request["timeout"] == 5


def test_fetch_omits_missing_token():
    session = DummySession(DummyResponse(payload={}))
    ProviderClient(session=session, environ={}).fetch(get_provider("stake"))

    assert "x-access-token" not in session.requests[0]["headers"]


def test_fetch_get_provider_sends_no_body():
    session = DummySession(DummyResponse(payload={"Value": []}))
    ProviderClient(session=session, environ={}).fetch(get_provider("onexbet"))

    assert session.requests[0]["method"] == "GET"
    assert session.requests[0]["json"] is None


def test_fetch_raises_on_error_status():
    session = DummySession(DummyResponse(status_code=503, text="unavailable"))
    with pytest.raises(ProviderError, match="503"):
        ProviderClient(session=session, environ={}).fetch(get_provider("ims"))


def test_fetch_raises_on_non_json_body():
    session = DummySession(DummyResponse(payload=ValueError("Expecting value")))
    with pytest.raises(ProviderError):
        ProviderClient(session=session, environ={}).fetch(get_provider("ims"))
