"""Test the registry authentication probe."""

import base64
import threading

import httpx
import pytest

from registry_logout.exceptions import AuthProbeError, ProbeCancelledError
from registry_logout.storage.probe import HttpAuthProbe

REALM = "https://auth.docker.io/token"


def _basic(username: str, secret: str) -> str:
    token = base64.b64encode(f"{username}:{secret}".encode()).decode()
    return f"Basic {token}"


def _bearer_registry(request: httpx.Request) -> httpx.Response:
    """Registry that hands out tokens to alice:pw."""
    if request.url.path == "/v2/":
        return httpx.Response(
            401,
            headers={
                "WWW-Authenticate": (
                    f'Bearer realm="{REALM}",service="registry.docker.io"'
                )
            },
        )
    assert request.url.host == "auth.docker.io"
    assert request.url.path == "/token"
    assert request.url.params["service"] == "registry.docker.io"
    if request.headers.get("authorization") == _basic("alice", "pw"):
        return httpx.Response(200, json={"token": "abc"})
    return httpx.Response(401)


def _basic_registry(request: httpx.Request) -> httpx.Response:
    if request.headers.get("authorization") == _basic("alice", "pw"):
        return httpx.Response(200)
    return httpx.Response(
        401, headers={"WWW-Authenticate": 'Basic realm="registry"'}
    )


def _probe(handler) -> HttpAuthProbe:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpAuthProbe(client=client)


def test_bearer() -> None:
    probe = _probe(_bearer_registry)
    probe.check("docker.io", "alice", "pw")
    with pytest.raises(AuthProbeError):
        probe.check("docker.io", "alice", "wrong")


def test_docker_hub_endpoint() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        return httpx.Response(200)

    _probe(handler).check("docker.io", "alice", "pw")
    assert seen == ["registry-1.docker.io"]


def test_basic() -> None:
    probe = _probe(_basic_registry)
    probe.check("registry.example.com", "alice", "pw")
    with pytest.raises(AuthProbeError):
        probe.check("registry.example.com", "mallory", "pw")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(404),
        httpx.Response(401),
        httpx.Response(401, headers={"WWW-Authenticate": "Bearer"}),
        httpx.Response(401, headers={"WWW-Authenticate": "Negotiate x"}),
        httpx.Response(
            401,
            headers={"WWW-Authenticate": 'Bearer realm="http://[::1/token"'},
        ),
    ],
)
def test_unusable_response(response: httpx.Response) -> None:
    probe = _probe(lambda request: response)
    with pytest.raises(AuthProbeError):
        probe.check("registry.example.com", "alice", "pw")


def test_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuthProbeError):
        _probe(handler).check("registry.example.com", "alice", "pw")


def test_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(ProbeCancelledError):
        _probe(handler).check("registry.example.com", "alice", "pw")


def test_cancelled() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    cancel = threading.Event()
    cancel.set()
    with pytest.raises(ProbeCancelledError):
        _probe(handler).check(
            "registry.example.com", "alice", "pw", cancel=cancel
        )
    assert requests == []


@pytest.mark.parametrize("status", [200, 403])
def test_cancelled_during_request(status: int) -> None:
    """A response arriving after cancellation is discarded."""
    cancel = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        cancel.set()
        return httpx.Response(status)

    with pytest.raises(ProbeCancelledError):
        _probe(handler).check(
            "registry.example.com", "alice", "pw", cancel=cancel
        )
