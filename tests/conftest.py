"""Test fixtures for registry logout."""

import base64
import json
import threading
from pathlib import Path

import pytest
from pydantic import SecretStr

from registry_logout.exceptions import AuthProbeError, ProbeCancelledError
from registry_logout.models.credential import CredentialEntry
from registry_logout.storage.authfile import AuthFileCredentialStore
from registry_logout.storage.probe import AuthProbe
from registry_logout.storage.store import MemoryCredentialStore


class FakeAuthProbe(AuthProbe):
    """Probe that answers from a fixed verdict and records its calls."""

    def __init__(self, verdict: str = "fail") -> None:
        self.verdict = verdict
        self.calls: list[tuple[str, str, str]] = []

    def check(
        self,
        host: str,
        username: str,
        secret: str,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        self.calls.append((host, username, secret))
        if cancel is not None and cancel.is_set():
            raise ProbeCancelledError("cancelled")
        match self.verdict:
            case "succeed":
                return
            case "cancel":
                raise ProbeCancelledError("deadline exceeded")
            case _:
                raise AuthProbeError("unauthorized")


def encode_auth(username: str, secret: str) -> str:
    return base64.b64encode(f"{username}:{secret}".encode()).decode()


def write_auth_file(path: Path, auths: dict[str, tuple[str, str]]) -> None:
    """Write a containers-format auth file."""
    data = {
        "auths": {
            host: {"auth": encode_auth(user, secret)}
            for host, (user, secret) in auths.items()
        }
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


@pytest.fixture
def alice() -> CredentialEntry:
    """Credential for user alice."""
    return CredentialEntry(username="alice", secret=SecretStr("pw"))


@pytest.fixture
def memory_store(alice: CredentialEntry) -> MemoryCredentialStore:
    """In-memory store holding one managed entry."""
    return MemoryCredentialStore({"registry.example.com": alice})


@pytest.fixture
def failing_probe() -> FakeAuthProbe:
    """Probe that rejects every credential."""
    return FakeAuthProbe("fail")


@pytest.fixture
def succeeding_probe() -> FakeAuthProbe:
    """Probe that accepts every credential."""
    return FakeAuthProbe("succeed")


@pytest.fixture
def auth_file(tmp_path: Path) -> Path:
    """Managed auth file holding credentials for two registries."""
    path = tmp_path / "containers" / "auth.json"
    write_auth_file(
        path,
        {
            "registry.example.com": ("alice", "pw"),
            "quay.io": ("bob", "hunter2"),
        },
    )
    return path


@pytest.fixture
def docker_config(tmp_path: Path) -> Path:
    """Docker config file holding a credential saved by ``docker login``."""
    path = tmp_path / "docker" / "config.json"
    write_auth_file(path, {"https://index.docker.io/v1/": ("carol", "s3kr1t")})
    return path


@pytest.fixture
def authfile_store(
    auth_file: Path, docker_config: Path
) -> AuthFileCredentialStore:
    """Auth-file store that also reads Docker's config."""
    return AuthFileCredentialStore(auth_file, foreign_files=[docker_config])


@pytest.fixture
def cancelling_probe() -> FakeAuthProbe:
    """Probe whose deadline always expires."""
    return FakeAuthProbe("cancel")
