"""
Patching of the string-to-string maps, such as labels & annotations.

The desired members are added or replaced, the other existing members
are left intact: nothing is ever removed from the map. The keys of the
desired map must be already escaped as pointer tokens by the caller
(see :func:`patchutils.escape`), since they go to the pointers as is.

JSON Patch cannot add a member to a map that does not exist yet.
So, if the original map is absent or empty, the map is created by the first
operation -- with one of the desired members inlined as a JSON object;
in that object, the key is a literal key, not a pointer token, so it is
unescaped. All other members are then added one by one via the pointers::

    [{"op": "add", "path": "/metadata/labels", "value": {"example.com/a": "1"}},
     {"op": "add", "path": "/metadata/labels/example.com~1b", "value": "2"}]
"""
from collections.abc import Mapping

from patchutils._cogs.helpers import typedefs
from patchutils._cogs.structs import patches, pointers, references
from patchutils._core.actions import loggers
from patchutils._core.patching import documents, outcomes


def build_map_operations(
        path: str,
        original: Mapping[str, str] | None,
        desired: Mapping[str, str],
) -> list[patches.PatchOperation]:
    operations: list[patches.PatchOperation] = []
    if not original:
        items = iter(desired.items())
        first = next(items, None)
        if first is not None:
            key, value = first
            operations.append(patches.add(path, {pointers.unescape(key): value}))
        for key, value in items:
            operations.append(patches.add(f'{path}/{key}', value))
    else:
        for key, value in desired.items():
            if key not in original:
                operations.append(patches.add(f'{path}/{key}', value))
            elif original[key] != value:
                operations.append(patches.replace(f'{path}/{key}', value))
    return operations


def patch_map(
        target: references.Target,
        applier: outcomes.Applier,
        path: str,
        original: Mapping[str, str] | None,
        desired: Mapping[str, str],
        *,
        logger: typedefs.Logger | None = None,
) -> outcomes.Outcome:
    """
    Add or replace the desired members of a map at the ``path`` of the target.

    Reports :class:`NoPatchRequired` if all the desired members are already there.
    """
    logger = loggers.get_logger(target, logger)
    operations = build_map_operations(path, original, desired)
    return documents.assemble(
        operations,
        target=target,
        applier=applier,
        reason=outcomes.NoPatchReason.NOTHING_TO_PATCH_IN_MAP,
        logger=logger,
    )


def patch_map_or_raise(
        target: references.Target,
        applier: outcomes.Applier,
        path: str,
        original: Mapping[str, str] | None,
        desired: Mapping[str, str],
        *,
        logger: typedefs.Logger | None = None,
) -> tuple[patches.PatchDocument, outcomes.ApplyFn]:
    return patch_map(target, applier, path, original, desired, logger=logger).unwrap()


def patch_map_fn(
        target: references.Target,
        applier: outcomes.Applier,
        path: str,
        original: Mapping[str, str] | None,
        desired: Mapping[str, str],
        *,
        logger: typedefs.Logger | None = None,
) -> outcomes.ApplyFn:
    _, apply_fn = patch_map(target, applier, path, original, desired, logger=logger).unwrap()
    return apply_fn
