"""Normalization of registry host names."""

from ..exceptions import InvalidRequestError

DOCKER_HUB = "docker.io"
DOCKER_HUB_ENDPOINT = "registry-1.docker.io"
DOCKER_HUB_ALIASES = frozenset(
    {"index.docker.io", "registry-1.docker.io", "registry.hub.docker.com"}
)
SCHEMES = ("https://", "http://")


def normalize_registry(server: str) -> str:
    """Reduce a user-supplied registry reference to its canonical form.

    The scheme and trailing slashes are dropped, the host part is
    lowercased, and Docker Hub aliases collapse to ``docker.io``.  A
    namespace path such as ``quay.io/org-a`` is kept, since auth files may
    hold separate credentials per namespace.  Normalizing an already
    normalized value returns it unchanged.

    Raises
    ------
    InvalidRequestError
        No host is left once the scheme is removed.
    """
    reference = server.strip()
    for scheme in SCHEMES:
        if reference.lower().startswith(scheme):
            reference = reference[len(scheme) :]
            break
    host, sep, path = reference.rstrip("/").partition("/")
    host = host.lower()
    if not host:
        raise InvalidRequestError(f"invalid registry {server!r}")
    if host in DOCKER_HUB_ALIASES:
        host = DOCKER_HUB
    return f"{host}{sep}{path}"


def registry_hostname(host: str) -> str:
    """Return the host part of a normalized registry, without namespace."""
    return host.split("/", 1)[0]


def registry_endpoint(host: str) -> str:
    """Return the host actually serving the registry API for ``host``."""
    hostname = registry_hostname(host)
    if hostname == DOCKER_HUB:
        return DOCKER_HUB_ENDPOINT
    return hostname
