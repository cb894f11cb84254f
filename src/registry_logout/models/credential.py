"""Model for a stored registry credential."""

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, Field, SecretStr


class CredentialEntry(BaseModel):
    """Username and secret saved for a registry."""

    username: Annotated[
        str,
        Field(
            title="Username",
            description="Username saved for the registry.",
            examples=["fbooth"],
        ),
    ]

    secret: Annotated[
        SecretStr,
        Field(
            title="Secret",
            description="Password or token saved for the registry.",
            examples=["hunter2"],
        ),
    ]

    source: Annotated[
        Path | None,
        Field(
            title="Source",
            description="Auth file the entry was read from, if any.",
        ),
    ] = None

    @property
    def complete(self) -> bool:
        """Both a username and a secret are present."""
        return bool(self.username) and bool(self.secret.get_secret_value())
