"""
HTTP sessions for the API servers, as configured by the discovered credentials.
"""
import base64
import contextlib
import ssl
import tempfile

import aiohttp

from patchutils._cogs.helpers import versions
from patchutils._cogs.structs import credentials


class APIContext:
    """
    An aiohttp session bound to one API server with one set of credentials.

    It is created once and re-used for all the apply functions of the same
    cluster, and must be closed after use -- explicitly or as a context manager::

        async with APIContext(patchutils.login()) as context:
            applier = RemoteApplier(context)
            ...

    The session belongs to the event loop in which the context was created.
    """

    session: aiohttp.ClientSession
    server: str
    default_namespace: str | None

    def __init__(
            self,
            info: credentials.ConnectionInfo,
            *,
            session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__()
        self.server = info.server
        self.default_namespace = info.default_namespace
        self.session = make_session(info) if session is None else session
        self.session.headers.setdefault('User-Agent', f'patchutils/{versions.version or "unknown"}')

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self.session.close()


def make_session(info: credentials.ConnectionInfo) -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(limit=0, ssl=make_ssl_context(info)),
        headers=make_headers(info),
        auth=aiohttp.BasicAuth(info.username, info.password)
             if info.username and info.password else None,
    )


def make_headers(info: credentials.ConnectionInfo) -> dict[str, str]:
    if info.scheme and info.token:
        return {'Authorization': f'{info.scheme} {info.token}'}
    elif info.scheme:
        return {'Authorization': info.scheme}
    elif info.token:
        return {'Authorization': f'Bearer {info.token}'}
    else:
        return {}


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    """
    Verify the server with the CA (if any), and authenticate with the client certificate (if any).
    """
    context = ssl.create_default_context(
        purpose=ssl.Purpose.SERVER_AUTH,
        cafile=info.ca_path,
        cadata=decode_to_pem(info.ca_data) if info.ca_data is not None else None,
    )

    # The client certificates can be loaded from files only. The files are needed only
    # while loading, so the inline data are stored to the temporary files just for that.
    with contextlib.ExitStack() as stack:
        cert_path = _materialize(stack, info.certificate_path, info.certificate_data)
        pkey_path = _materialize(stack, info.private_key_path, info.private_key_data)
        if cert_path and pkey_path:
            context.load_cert_chain(certfile=cert_path, keyfile=pkey_path)

    if info.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def decode_to_pem(data: str | bytes) -> str:
    """ Accept both PEM and base64-encoded PEM, as kubeconfigs have both. """
    match data:
        case str() if data.startswith('-----BEGIN '):
            return data
        case bytes() if data.startswith(b'-----BEGIN '):
            return data.decode('ascii')
        case _:
            return base64.b64decode(data).decode('ascii')


def _materialize(
        stack: contextlib.ExitStack,
        path: str | None,
        data: str | bytes | None,
) -> str | None:
    if path:
        return path
    if not data:
        return None
    file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
    file.write(decode_to_pem(data).encode('ascii'))
    return file.name
