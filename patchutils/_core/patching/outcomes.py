"""
The results of the patch generation, both successful and not.

Every builder reports its result in the same way: the generated patches,
the apply function, and the generation error (if any). The apply function
is never called by the builders themselves: the generation is local & pure,
while the application is remote, can fail, and can be retried by the caller.

There are two kinds of generation errors:

* :class:`NoPatchRequired` is an expected outcome rather than a failure:
  the object is already in the desired state, or the value to be removed
  is not there. The callers usually treat it as "nothing to do".
* :class:`SerializationError` is a genuine failure: the value cannot be
  represented in JSON, so the patch cannot be generated at all.

The errors of the apply functions (see :mod:`patchutils._cogs.clients.errors`)
are of a different hierarchy, and are raised only when those functions are called.
"""
import enum
from collections.abc import Awaitable, Callable
from typing import NamedTuple, Protocol

from patchutils._cogs.structs import references
from patchutils._cogs.structs.patches import PatchDocument

# A deferred application of the generated patches; raises the transport errors (if any).
ApplyFn = Callable[[], Awaitable[object]]


class Applier(Protocol):
    """
    Anything that can deliver the serialized JSON Patch to the target object.

    The patch is an array of operations, to be applied atomically as a whole.
    The result is implementation-specific: e.g. the patched object's body.
    """
    async def __call__(self, target: references.Target, patch: bytes) -> object: ...


class NoPatchReason(str, enum.Enum):
    NOTHING_TO_PATCH_IN_MAP = "nothing to patch in map"
    FINALIZER_INDEX_NOT_FOUND = "finalizer index not found"


class PatchError(Exception):
    """ A base class for all errors of the patch generation (never of the application). """


class NoPatchRequired(PatchError):
    """ No patch is needed or possible: e.g. all the values are already in place. """

    def __init__(self, reason: NoPatchReason, message: str | None = None) -> None:
        super().__init__(message or reason.value)
        self.reason = reason


class SerializationError(PatchError):
    """ The values cannot be serialized to JSON; see ``__cause__`` for details. """


class Outcome(NamedTuple):
    """
    The result of a builder: ``(patches, apply_fn, error)``.

    Either the error is set and the apply function is ``None``,
    or the error is ``None`` and there is an apply function
    for the non-empty patches.
    """
    patches: PatchDocument
    apply_fn: ApplyFn | None
    error: PatchError | None

    def unwrap(self) -> tuple[PatchDocument, ApplyFn]:
        """
        Get the patches & the apply function, or raise the generation error.

        Use it when no generation errors are expected, so that an unexpected
        one interrupts the flow rather than being silently ignored::

            patches, apply_fn = patch_spec(target, applier, spec).unwrap()
            await apply_fn()
        """
        if self.error is not None:
            raise self.error
        if self.apply_fn is None:
            raise RuntimeError("An outcome has neither an error nor an apply function.")
        return self.patches, self.apply_fn
