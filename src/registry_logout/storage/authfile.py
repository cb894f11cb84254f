"""Credential store backed by containers-style auth files.

The managed file looks like::

    {"auths": {"quay.io": {"auth": "<base64 of user:secret>"}}}

Only the managed file is ever modified.  Foreign files (Docker's
``config.json`` and the legacy ``~/.dockercfg``) are consulted when reading
an entry, so that credentials saved by ``docker login`` can be recognized
even though this tool will not remove them.
"""

import base64
import binascii
import json
import os
import tempfile
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
from pydantic import SecretStr

from ..exceptions import (
    CredentialStoreError,
    InvalidRequestError,
    NotLoggedInError,
)
from ..models.credential import CredentialEntry
from ..models.registry_host import DOCKER_HUB, normalize_registry
from .store import CredentialStore

LEGACY_DOCKERCFG = ".dockercfg"
DOCKER_HUB_LEGACY_KEY = f"{DOCKER_HUB}/v1"


class AuthFileCredentialStore(CredentialStore):
    """Store credentials in a JSON auth file.

    Parameters
    ----------
    auth_file
        Auth file this store manages.  It need not exist yet.
    foreign_files
        Auth files written by other tools, searched in order by
        `read_one` after ``auth_file``.
    """

    def __init__(
        self, auth_file: Path, foreign_files: Iterable[Path] = ()
    ) -> None:
        self._auth_file = auth_file
        self._foreign_files = list(foreign_files)
        self._lock = threading.Lock()
        self._logger = structlog.get_logger(__name__).bind(
            auth_file=str(auth_file)
        )

    def remove_one(self, host: str) -> None:
        with self._lock:
            data = self._load(self._auth_file)
            auths = self._auths(self._auth_file, data)
            matches = [k for k in auths if _key_host(k) == host]
            if not matches:
                raise NotLoggedInError(host)
            for key in matches:
                del auths[key]
            self._save(data)
        self._logger.debug(f"Removed {len(matches)} entries for {host}")

    def remove_all(self) -> None:
        with self._lock:
            data = self._load(self._auth_file)
            if not data and not self._auth_file.exists():
                self._logger.debug("No auth file, nothing to remove")
                return
            count = len(self._auths(self._auth_file, data))
            data["auths"] = {}
            self._save(data)
        self._logger.debug(f"Removed {count} entries")

    def read_one(self, host: str) -> CredentialEntry | None:
        with self._lock:
            for path in [self._auth_file, *self._foreign_files]:
                auths = self._load_auths(path)
                for key, value in auths.items():
                    if _key_host(key) != host:
                        continue
                    entry = _decode_entry(path, key, value)
                    if entry is not None:
                        self._logger.debug(f"Found entry for {host} in {path}")
                        return entry
        return None

    def _load_auths(self, path: Path) -> dict[str, Any]:
        data = self._load(path)
        if path.name == LEGACY_DOCKERCFG:
            return data
        return self._auths(path, data)

    def _auths(self, path: Path, data: dict[str, Any]) -> dict[str, Any]:
        auths = data.setdefault("auths", {})
        if not isinstance(auths, dict):
            raise CredentialStoreError(f"{path}: 'auths' is not an object")
        return auths

    def _load(self, path: Path) -> dict[str, Any]:
        try:
            text = path.read_text()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise CredentialStoreError(f"cannot read {path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CredentialStoreError(
                f"{path} is not valid JSON: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise CredentialStoreError(f"{path} does not hold a JSON object")
        return data

    def _save(self, data: dict[str, Any]) -> None:
        # Write a sibling temporary file, then rename over the original,
        # so readers see either the old contents or the new ones.
        directory = self._auth_file.parent
        try:
            directory.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd, tmpname = tempfile.mkstemp(
                dir=directory, prefix=f".{self._auth_file.name}."
            )
        except OSError as exc:
            raise CredentialStoreError(
                f"cannot write {self._auth_file}: {exc}"
            ) from exc
        tmp = Path(tmpname)
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            tmp.chmod(0o600)
            tmp.replace(self._auth_file)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise CredentialStoreError(
                f"cannot write {self._auth_file}: {exc}"
            ) from exc


def _key_host(key: str) -> str | None:
    try:
        host = normalize_registry(key)
    except InvalidRequestError:
        return None
    # Docker writes its Hub credentials as "https://index.docker.io/v1/".
    if host == DOCKER_HUB_LEGACY_KEY:
        return DOCKER_HUB
    return host


def _decode_entry(
    path: Path, key: str, value: Any
) -> CredentialEntry | None:
    if not isinstance(value, dict) or not value.get("auth"):
        # Present but empty, e.g. a credential helper placeholder.
        return None
    try:
        decoded = base64.b64decode(value["auth"], validate=True).decode()
    except (binascii.Error, UnicodeDecodeError, TypeError) as exc:
        raise CredentialStoreError(
            f"{path}: cannot decode credentials for {key!r}: {exc}"
        ) from exc
    username, sep, secret = decoded.partition(":")
    if not sep:
        raise CredentialStoreError(
            f"{path}: credentials for {key!r} are not 'user:secret'"
        )
    return CredentialEntry(
        username=username, secret=SecretStr(secret), source=path
    )
