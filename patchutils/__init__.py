"""
JSON Patches (RFC 6902) for Kubernetes objects: generated locally, applied on demand.

Everything that the users need is importable from here; the internal modules
can change without notice.
"""
# isort: skip_file

# The internals import modules and refer to their members; the public
# interface re-exports the members themselves, grouped by their origin.

from patchutils._cogs.clients.auth import (
    APIContext,
)
from patchutils._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    APIUnprocessableEntityError,
)
from patchutils._cogs.clients.login import (
    login,
    login_with_kubeconfig,
    login_with_service_account,
)
from patchutils._cogs.clients.patching import (
    RemoteApplier,
)
from patchutils._cogs.configs.configuration import (
    ClientSettings,
    NetworkingSettings,
    PatchingSettings,
)
from patchutils._cogs.helpers.typedefs import (
    Logger,
)
from patchutils._cogs.helpers.versions import (
    version as __version__,
)
from patchutils._cogs.structs.bodies import (
    RawBody,
    RawMeta,
    Labels,
    Annotations,
    build_target,
)
from patchutils._cogs.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from patchutils._cogs.structs.patches import (
    JSONPatch,
    JSONPatchItem,
    JSONPatchOp,
    PatchOperation,
    PatchDocument,
)
from patchutils._cogs.structs.pointers import (
    escape,
    unescape,
)
from patchutils._cogs.structs.references import (
    Resource,
    Target,
)
from patchutils._core.actions.loggers import (
    LogFormat,
    TargetLogger,
    configure,
)
from patchutils._core.patching.outcomes import (
    Applier,
    ApplyFn,
    Outcome,
    PatchError,
    NoPatchRequired,
    NoPatchReason,
    SerializationError,
)
from patchutils._core.patching.maps import (
    patch_map,
    patch_map_or_raise,
    patch_map_fn,
)
from patchutils._core.patching.finalizers import (
    patch_finalizer_in,
    patch_finalizer_in_or_raise,
    patch_finalizer_in_fn,
    patch_finalizer_out,
    patch_finalizer_out_or_raise,
    patch_finalizer_out_fn,
)
from patchutils._core.patching.specs import (
    patch_spec,
    patch_spec_or_raise,
    patch_spec_fn,
)

__all__ = [
    'APIContext',
    'APIError',
    'APIClientError',
    'APIServerError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'APIUnprocessableEntityError',
    'login',
    'login_with_kubeconfig',
    'login_with_service_account',
    'RemoteApplier',
    'ClientSettings',
    'NetworkingSettings',
    'PatchingSettings',
    'Logger',
    'RawBody',
    'RawMeta',
    'Labels',
    'Annotations',
    'build_target',
    'LoginError',
    'ConnectionInfo',
    'JSONPatch',
    'JSONPatchItem',
    'JSONPatchOp',
    'PatchOperation',
    'PatchDocument',
    'escape',
    'unescape',
    'Resource',
    'Target',
    'LogFormat',
    'TargetLogger',
    'configure',
    'Applier',
    'ApplyFn',
    'Outcome',
    'PatchError',
    'NoPatchRequired',
    'NoPatchReason',
    'SerializationError',
    'patch_map',
    'patch_map_or_raise',
    'patch_map_fn',
    'patch_finalizer_in',
    'patch_finalizer_in_or_raise',
    'patch_finalizer_in_fn',
    'patch_finalizer_out',
    'patch_finalizer_out_or_raise',
    'patch_finalizer_out_fn',
    'patch_spec',
    'patch_spec_or_raise',
    'patch_spec_fn',
]
