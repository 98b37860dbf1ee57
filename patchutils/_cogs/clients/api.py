"""
The HTTP layer: single requests to the API, with optional retries.

Only the transient errors are retried: the connection errors, the timeouts,
and HTTP 5xx. The other errors (e.g. 404, 409, 422) are the server's
decisions about the patch, and repeating the same patch changes nothing.
"""
import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

import aiohttp

from patchutils._cogs.clients import auth, errors
from patchutils._cogs.configs import configuration
from patchutils._cogs.helpers import typedefs

RETRYABLE_ERRORS = (aiohttp.ClientConnectionError, errors.APIServerError, asyncio.TimeoutError)


def get_backoffs(settings: configuration.ClientSettings) -> Sequence[float]:
    backoffs = settings.networking.error_backoffs
    if isinstance(backoffs, (int, float)):
        return [backoffs]
    return list(backoffs)


async def request(
        method: str,
        url: str,  # absolute, or relative to the server's root
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        data: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Send one request and check its status; retry it as configured in the settings.

    The response is returned unread: the caller decides how to consume it.
    """
    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')
    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    what = f"{method.upper()} {url}"
    backoffs = get_backoffs(settings)
    attempts = len(backoffs) + 1
    for attempt in range(1, attempts + 1):
        idx = f"#{attempt}/{attempts}"
        if attempt > 1:
            logger.debug(f"Request attempt {idx}: {what}")
        try:
            response = await context.session.request(
                method=method,
                url=url,
                data=data,
                headers=headers,
                timeout=timeout,
            )
            await errors.check_response(response)
        except RETRYABLE_ERRORS as e:
            if attempt == attempts:
                logger.error(f"Request attempt {idx} failed; escalating: {what} -> {e!r}")
                raise
            logger.error(f"Request attempt {idx} failed; will retry: {what} -> {e!r}")
            await asyncio.sleep(backoffs[attempt - 1])
        else:
            if attempt > 1:
                logger.debug(f"Request attempt {idx} succeeded: {what}")
            return response

    raise RuntimeError("Unreachable: the last attempt either returns or raises.")


async def patch(
        url: str,
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        data: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        logger: typedefs.Logger,
) -> Any:
    """ PATCH the URL and return the decoded JSON of the response. """
    response = await request('patch', url, data=data, headers=headers, timeout=timeout,
                             context=context, settings=settings, logger=logger)
    async with response:
        return await response.json()
