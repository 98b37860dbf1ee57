import dataclasses
import json
import logging
import re
from unittest.mock import AsyncMock, MagicMock

import aiohttp.web
import aresponses as aresponses_lib
import jsonpatch
import pytest

from patchutils._cogs.clients.auth import APIContext
from patchutils._cogs.configs.configuration import ClientSettings
from patchutils._cogs.structs.credentials import ConnectionInfo
from patchutils._cogs.structs.references import NamespaceName, Resource, Target


@pytest.fixture()
def resource():
    """ The resource used in the tests. Usually mocked, so it does not matter. """
    return Resource('example.com', 'v1', 'widgets', kind='Widget')


@pytest.fixture()
def cluster_resource():
    return Resource('', 'v1', 'namespaces', kind='Namespace', namespaced=False)


@pytest.fixture()
def target(resource):
    return Target(resource=resource, name='name1', namespace=NamespaceName('ns1'))


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('patchutils.tests')


@pytest.fixture()
def applier():
    """ An applier that remembers the calls and does nothing else. """
    return AsyncMock(return_value={'applied': True})


@dataclasses.dataclass
class FakeObject:
    """
    A fake API server for a single object: the patches are applied locally.

    The patches are applied atomically, as the API servers do: if any of the
    operations fails, the object remains unchanged, and the whole patch fails.
    """
    body: dict
    calls: list = dataclasses.field(default_factory=list)

    async def __call__(self, target, patch):
        self.calls.append((target, patch))
        self.body = jsonpatch.apply_patch(self.body, json.loads(patch))
        return self.body


@pytest.fixture()
def fake_object():
    """ A factory of the fake objects, which are also the appliers for themselves. """
    def factory(body):
        return FakeObject(body=body)
    return factory


@pytest.fixture()
def hostname():
    """ A fake hostname to be used in all aiohttp/aresponses tests. """
    return 'fake-host'


# Overrides the plugin's fixture, which depends on the loop fixtures
# that differ across pytest-asyncio versions.
@pytest.fixture()
async def aresponses():
    async with aresponses_lib.ResponsesMockServer() as server:
        yield server


@pytest.fixture()
async def context(hostname):
    info = ConnectionInfo(server=f'http://{hostname}', token='xyz')
    async with APIContext(info) as context:
        yield context


@pytest.fixture()
def resp_mocker(aresponses):
    """
    Make spyable server-side handlers for `aresponses`.

    ``resp_mocker(return_value=...)`` or ``resp_mocker(side_effect=[...])``
    returns an async mock to be registered with ``aresponses.add()``.
    The handled requests are then available in its ``call_args_list``,
    with the body read into ``request.raw_data`` (bytes) and ``request.data``
    (decoded JSON, or text if it is not JSON)::

        handler = resp_mocker(return_value=aiohttp.web.json_response({}))
        aresponses.add(hostname, target.get_url(), 'patch', handler)
        ...
        request = handler.call_args_list[0][0][0]
        assert request.data == [...]
    """
    def factory(*args, **kwargs):
        responder = MagicMock(*args, **kwargs)

        async def handle(request):
            # The body can only be read while the request is being handled.
            request.raw_data = await request.read()
            try:
                request.data = json.loads(request.raw_data)
            except json.JSONDecodeError:
                request.data = request.raw_data.decode('utf-8')
            return responder()

        return AsyncMock(side_effect=handle)
    return factory


@pytest.fixture()
def status_response():
    """ A factory of the K8s-like error responses. """
    def factory(status, message='boo!', reason='Failure'):
        payload = {'kind': 'Status', 'code': status, 'status': 'Failure',
                   'reason': reason, 'message': message}
        return aiohttp.web.json_response(payload, status=status)
    return factory


@pytest.fixture()
def assert_logs(caplog):
    """
    Check that the log messages match the patterns in that order.

    Other messages can appear in between and are ignored, unless ``strict``.
    None of the messages can match any of the ``prohibited`` patterns.
    """
    caplog.set_level(0)

    def check(patterns, prohibited=(), strict=False):
        __traceback_hide__ = True
        expected = list(patterns)
        for message in caplog.messages:
            for pattern in prohibited:
                if re.search(pattern, message):
                    raise AssertionError(f"Prohibited pattern {pattern!r} in: {message!r}")

            matching = [idx for idx, pattern in enumerate(expected) if re.search(pattern, message)]
            if matching and matching[0] > 0:
                raise AssertionError(f"Patterns are skipped: {expected[:matching[0]]!r}")
            elif matching:
                del expected[0]
            elif strict:
                raise AssertionError(f"Unexpected message: {message!r}")

        if expected:
            raise AssertionError(f"Patterns are missing: {expected!r}")

    return check
