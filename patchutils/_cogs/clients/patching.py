import logging

from patchutils._cogs.clients import api, auth
from patchutils._cogs.configs import configuration
from patchutils._cogs.helpers import typedefs
from patchutils._cogs.structs import bodies, references

logger = logging.getLogger(__name__)


async def patch_obj(
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        target: references.Target,
        patch: bytes,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Patch an object with a serialized JSON Patch (RFC 6902).

    Returns the patched body as reported by the server.

    Unlike the merge-patches, the JSON Patches fail as a whole if any of
    the operations fails: e.g. when removing an absent path (HTTP 422),
    or when the object is absent (HTTP 404). These errors are escalated as is.
    """
    patched_body: bodies.RawBody = await api.patch(
        url=target.get_url(),
        headers={'Content-Type': settings.patching.content_type},
        data=patch,
        context=context,
        settings=settings,
        logger=logger,
    )
    return patched_body


class RemoteApplier:
    """
    Apply the patches to the objects in the K8s API, one request per patch.

    Usage::

        async with patchutils.APIContext(patchutils.login()) as context:
            applier = patchutils.RemoteApplier(context)
            apply_fn = patchutils.patch_finalizer_in_fn(target, applier, finalizers, 'x/y')
            await apply_fn()
    """

    def __init__(
            self,
            context: auth.APIContext,
            *,
            settings: configuration.ClientSettings | None = None,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        self.context = context
        self.settings = settings if settings is not None else configuration.ClientSettings()
        self.logger = logger

    async def __call__(self, target: references.Target, patch: bytes) -> bodies.RawBody:
        return await patch_obj(
            context=self.context,
            settings=self.settings,
            target=target,
            patch=patch,
            logger=self.logger,
        )
