"""
Adding & removing the finalizers of the objects.

Finalizers are used to block the actual deletion until the finalizers
are removed, meaning that the controller has done all its duties
to "release" the object (e.g. cleanups of the related resources).

The list is addressed by the index, which is calculated from the snapshot
of the finalizers as passed by the caller. If the object's finalizers change
between the snapshot and the application (e.g. by another controller),
the index can point to a wrong finalizer: the callers must re-read the object
and re-generate the patch rather than retry the old apply function.
"""
from collections.abc import Sequence

from patchutils._cogs.configs import configuration
from patchutils._cogs.helpers import typedefs
from patchutils._cogs.structs import patches, references
from patchutils._core.actions import loggers
from patchutils._core.patching import documents, outcomes


def build_addition(
        path: str,
        finalizers: Sequence[str] | None,
        finalizer: str,
) -> list[patches.PatchOperation]:
    if finalizers is None:
        return [patches.add(path, [finalizer])]
    else:
        return [patches.add(f'{path}/-', finalizer)]


def build_removal(
        path: str,
        finalizers: Sequence[str] | None,
        finalizer: str,
) -> list[patches.PatchOperation]:
    # The last finalizer goes with the whole list, whatever it is.
    if finalizers is not None and len(finalizers) == 1:
        return [patches.remove(path)]
    for idx, existing in enumerate(finalizers or []):
        if existing == finalizer:
            return [patches.remove(f'{path}/{idx}')]
    return []


def patch_finalizer_in(
        target: references.Target,
        applier: outcomes.Applier,
        finalizers: Sequence[str] | None,
        finalizer: str,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> outcomes.Outcome:
    """
    Append the finalizer to the target's finalizers, creating the list if absent.

    There is no check for duplicates: the finalizer is appended even if it is
    already in the list. Check it in advance if the duplicates are undesired.
    """
    settings = settings if settings is not None else configuration.ClientSettings()
    logger = loggers.get_logger(target, logger)
    if finalizers is not None and finalizer in finalizers:
        logger.debug(f"Finalizer {finalizer!r} is already present; appending anyway.")
    operations = build_addition(settings.patching.finalizers_path, finalizers, finalizer)
    return documents.assemble(
        operations,
        target=target,
        applier=applier,
        logger=logger,
    )


def patch_finalizer_in_or_raise(
        target: references.Target,
        applier: outcomes.Applier,
        finalizers: Sequence[str] | None,
        finalizer: str,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> tuple[patches.PatchDocument, outcomes.ApplyFn]:
    outcome = patch_finalizer_in(target, applier, finalizers, finalizer,
                                 settings=settings, logger=logger)
    return outcome.unwrap()


def patch_finalizer_in_fn(
        target: references.Target,
        applier: outcomes.Applier,
        finalizers: Sequence[str] | None,
        finalizer: str,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> outcomes.ApplyFn:
    outcome = patch_finalizer_in(target, applier, finalizers, finalizer,
                                 settings=settings, logger=logger)
    _, apply_fn = outcome.unwrap()
    return apply_fn


def patch_finalizer_out(
        target: references.Target,
        applier: outcomes.Applier,
        finalizers: Sequence[str] | None,
        finalizer: str,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> outcomes.Outcome:
    """
    Remove the finalizer from the target's finalizers.

    If it is the only finalizer, the whole list is removed -- without checking
    if it is the requested finalizer or another one. Otherwise, the first
    occurrence of the finalizer is removed by its index in the list.

    Reports :class:`NoPatchRequired` if the finalizer is not in the list.
    """
    settings = settings if settings is not None else configuration.ClientSettings()
    logger = loggers.get_logger(target, logger)
    operations = build_removal(settings.patching.finalizers_path, finalizers, finalizer)
    return documents.assemble(
        operations,
        target=target,
        applier=applier,
        reason=outcomes.NoPatchReason.FINALIZER_INDEX_NOT_FOUND,
        logger=logger,
    )


def patch_finalizer_out_or_raise(
        target: references.Target,
        applier: outcomes.Applier,
        finalizers: Sequence[str] | None,
        finalizer: str,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> tuple[patches.PatchDocument, outcomes.ApplyFn]:
    outcome = patch_finalizer_out(target, applier, finalizers, finalizer,
                                  settings=settings, logger=logger)
    return outcome.unwrap()


def patch_finalizer_out_fn(
        target: references.Target,
        applier: outcomes.Applier,
        finalizers: Sequence[str] | None,
        finalizer: str,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> outcomes.ApplyFn:
    outcome = patch_finalizer_out(target, applier, finalizers, finalizer,
                                  settings=settings, logger=logger)
    _, apply_fn = outcome.unwrap()
    return apply_fn
