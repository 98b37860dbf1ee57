"""
Errors of the apply functions, as reported by the API servers.

These are raised only when the patches are sent, never when they are
generated. The client library's own errors (``aiohttp``) are not exposed
for the HTTP statuses: they are converted to :class:`APIError` & co,
with the original error chained as the cause. The network-level errors
(connectivity, SSL, timeouts) escalate as they are.

The statuses that the callers usually react to have their own classes:
e.g. 404 for an object deleted before the patch, 409 for the conflicts,
422 for a JSON Patch that does not fit the object anymore (such as
a finalizer removal by an index that is now out of range).
"""
import collections.abc
import json
from collections.abc import Collection
from typing import Literal, TypedDict

import aiohttp


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/kubernetes-api/common-definitions/status/
class RawStatus(TypedDict):
    apiVersion: str
    kind: Literal["Status"]
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


class APIError(Exception):
    """ A non-successful HTTP status of the API, with the server's explanation if any. """

    def __init__(self, payload: RawStatus | None, *, status: int) -> None:
        super().__init__(payload.get('message') if payload else None, payload)
        self._payload = payload
        self._status = status

    @property
    def status(self) -> int:
        """ The HTTP status of the response (unlike ``code``, which is in the payload). """
        return self._status

    @property
    def code(self) -> int | None:
        return None if self._payload is None else self._payload.get('code')

    @property
    def message(self) -> str | None:
        return None if self._payload is None else self._payload.get('message')

    @property
    def details(self) -> RawStatusDetails | None:
        return None if self._payload is None else self._payload.get('details')


class APIClientError(APIError):
    pass


class APIServerError(APIError):
    pass


class APIUnauthorizedError(APIClientError):
    pass


class APIForbiddenError(APIClientError):
    pass


class APINotFoundError(APIClientError):
    pass


class APIConflictError(APIClientError):
    pass


class APIUnprocessableEntityError(APIClientError):
    pass


_SPECIFIC_ERRORS: dict[int, type[APIError]] = {
    401: APIUnauthorizedError,
    403: APIForbiddenError,
    404: APINotFoundError,
    409: APIConflictError,
    422: APIUnprocessableEntityError,
}


def classify(status: int) -> type[APIError]:
    """ Pick the most specific error class for an HTTP status (4xx/5xx). """
    if status in _SPECIFIC_ERRORS:
        return _SPECIFIC_ERRORS[status]
    elif 400 <= status < 500:
        return APIClientError
    elif 500 <= status < 600:
        return APIServerError
    else:
        return APIError


async def _read_status(response: aiohttp.ClientResponse) -> RawStatus | None:
    try:
        payload = await response.json()
    except (json.JSONDecodeError, aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
        return None

    # Anything but a K8s Status can contain the object's data, which must not leak into the logs.
    if isinstance(payload, collections.abc.Mapping) and payload.get('kind') == 'Status':
        status: RawStatus = payload  # type: ignore
        return status
    return None


async def check_response(response: aiohttp.ClientResponse) -> None:
    """ Raise an :class:`APIError` (or a subclass) if the response is not successful. """
    if response.status < 400:
        return

    # The body must be read now: raise_for_status() releases the connection.
    payload = await _read_status(response)
    cls = classify(response.status)
    try:
        response.raise_for_status()
    except aiohttp.ClientResponseError as e:
        raise cls(payload, status=response.status) from e
