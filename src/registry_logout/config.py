"""Configuration for registry logout."""

from __future__ import annotations

import datetime
import os
from pathlib import Path
from typing import Annotated, Self

import yaml
from pydantic import Field
from safir.pydantic import CamelCaseModel, HumanTimedelta


def default_auth_file() -> Path:
    """Locate the auth file written by ``login``.

    ``REGISTRY_AUTH_FILE`` wins; otherwise the file lives under
    ``XDG_RUNTIME_DIR``, or under ``/run/containers/<uid>`` when that is
    unset.
    """
    if override := os.getenv("REGISTRY_AUTH_FILE"):
        return Path(override)
    if runtime_dir := os.getenv("XDG_RUNTIME_DIR"):
        return Path(runtime_dir) / "containers" / "auth.json"
    return Path("/run/containers") / str(os.getuid()) / "auth.json"


def default_foreign_auth_files() -> list[Path]:
    """Locate the auth files written by ``docker login``."""
    if docker_config := os.getenv("DOCKER_CONFIG"):
        config_json = Path(docker_config) / "config.json"
    else:
        config_json = Path.home() / ".docker" / "config.json"
    return [config_json, Path.home() / ".dockercfg"]


class LogoutConfig(CamelCaseModel):
    """Configuration for removing saved registry credentials."""

    auth_file: Annotated[
        Path | None,
        Field(
            title="Auth file",
            description=(
                "Auth file whose credentials may be removed.  If not set, "
                "REGISTRY_AUTH_FILE or the per-user runtime location is used."
            ),
            examples=[Path("/run/user/1000/containers/auth.json")],
        ),
    ] = None

    foreign_auth_files: Annotated[
        list[Path],
        Field(
            title="Foreign auth files",
            description=(
                "Auth files written by other tools.  They are never "
                "modified, only read to recognize logins made elsewhere."
            ),
            default_factory=default_foreign_auth_files,
        ),
    ]

    probe_timeout: Annotated[
        HumanTimedelta,
        Field(
            title="Probe timeout",
            description=(
                "How long to wait for a registry when checking whether "
                "credentials are still valid."
            ),
            examples=["30s"],
        ),
    ] = datetime.timedelta(seconds=30)

    tls_verify: Annotated[
        bool,
        Field(
            title="TLS verify",
            description="Require valid TLS certificates from registries.",
        ),
    ] = True

    debug: Annotated[
        bool,
        Field(
            title="Debug",
            description="Much more verbose logging.",
        ),
    ] = False

    def resolved_auth_file(self) -> Path:
        return self.auth_file or default_auth_file()

    @classmethod
    def from_file(cls, path: Path) -> Self:
        return cls.model_validate(yaml.safe_load(path.read_text()) or {})
