"""
Credentials for connecting to the API servers.

Unlike a full-featured operator, there is no re-authentication here:
the credentials are discovered once (see :mod:`patchutils._cogs.clients.login`)
and used for a single session; the expired credentials fail the apply calls
with :class:`patchutils.APIUnauthorizedError`, and it is up to the caller
to re-login and retry.
"""
import dataclasses


class LoginError(Exception):
    """ Raised when the credentials cannot be discovered or are invalid. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A single endpoint with specific credentials and connection flags to use.
    """
    server: str  # e.g. "https://localhost:443"
    ca_path: str | None = None
    ca_data: str | bytes | None = None
    insecure: bool | None = None
    username: str | None = None
    password: str | None = None
    scheme: str | None = None  # RFC-7235/5.1: e.g. Bearer, Basic, Digest, etc.
    token: str | None = None
    certificate_path: str | None = None
    certificate_data: str | bytes | None = None
    private_key_path: str | None = None
    private_key_data: str | bytes | None = None
    default_namespace: str | None = None
