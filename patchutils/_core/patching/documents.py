"""
Assembly of the generated operations into the patch documents & apply functions.

All builders end the same way: the emitted operations become one patch
document, which is bound to one applier call for the target object.
If nothing was emitted, the builder's own reason of "no patch required"
is reported instead, and there is nothing to apply.
"""
from collections.abc import Iterable

from patchutils._cogs.helpers import typedefs
from patchutils._cogs.structs import patches, references
from patchutils._core.patching import outcomes


def make_apply_fn(
        *,
        target: references.Target,
        applier: outcomes.Applier,
        document: patches.PatchDocument,
        logger: typedefs.Logger,
) -> outcomes.ApplyFn:
    """
    Bind the patch to a single call of the applier, to be awaited later.

    The payload is serialized now, so that the apply function sends exactly
    what was generated, no matter how many times (if ever) it is called.
    """
    payload = document.serialize()

    async def apply_fn() -> object:
        logger.debug(f"Patching with {len(document)} operation(s): {payload.decode('utf-8')}")
        return await applier(target, payload)

    return apply_fn


def assemble(
        operations: Iterable[patches.PatchOperation],
        *,
        target: references.Target,
        applier: outcomes.Applier,
        logger: typedefs.Logger,
        reason: outcomes.NoPatchReason | None = None,
) -> outcomes.Outcome:
    document = patches.PatchDocument(operations)
    if not document:
        if reason is None:
            raise RuntimeError("A builder emitted no operations where at least one is expected.")
        logger.debug(f"No patch is required: {reason.value}.")
        error = outcomes.NoPatchRequired(reason)
        return outcomes.Outcome(patches=document, apply_fn=None, error=error)

    apply_fn = make_apply_fn(target=target, applier=applier, document=document, logger=logger)
    return outcomes.Outcome(patches=document, apply_fn=apply_fn, error=None)
