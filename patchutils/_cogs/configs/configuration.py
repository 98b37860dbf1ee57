"""
All configuration flags, options, settings to fine-tune the patching.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults)::

    settings = patchutils.ClientSettings()
    settings.networking.request_timeout = 30
    settings.networking.error_backoffs = [1, 2, 5]
    settings.patching.finalizers_path = '/metadata/finalizers'
"""
import dataclasses
from collections.abc import Iterable


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: float | None = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for a single API request (the whole request-response cycle).
    """

    connect_timeout: float | None = None
    """
    A timeout for establishing a connection to the API server.
    """

    error_backoffs: float | Iterable[float] = ()
    """
    Backoffs (in seconds) for retrying the API requests
    on the connection errors, timeouts, and HTTP 5xx responses.

    The number of retries is the number of backoffs; a single float means
    one retry after that interval. The default is not to retry:
    index-based patches (e.g. finalizer removal) are not idempotent,
    and a request failed on the client side could still be applied
    on the server side. Set the backoffs only if the patches are safe to repeat.
    """


@dataclasses.dataclass
class PatchingSettings:

    finalizers_path: str = '/metadata/finalizers'
    """
    A JSON Pointer to the list of the finalizers in the object.
    """

    spec_path: str = '/spec'
    """
    A JSON Pointer to the spec of the object, as replaced by the spec patches.
    """

    content_type: str = 'application/json-patch+json'
    """
    The media type of the patches, as sent to the API server.
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    patching: PatchingSettings = dataclasses.field(default_factory=PatchingSettings)
