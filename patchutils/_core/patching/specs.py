"""
Replacing the whole spec of the objects.

The spec is replaced as a whole, not merged: the fields absent
in the new spec are removed from the object. So, the new spec is usually
the old spec with some fields modified -- as taken from the object itself.
"""
import dataclasses
from typing import Any

from patchutils._cogs.configs import configuration
from patchutils._cogs.helpers import typedefs
from patchutils._cogs.structs import patches, references
from patchutils._core.actions import loggers
from patchutils._core.patching import documents, outcomes


def encode(value: Any) -> Any:
    """
    Convert the known non-JSON values to JSON-compatible ones; fail on the unknown.

    Used as the ``default=`` of the JSON serializer, so it is only called
    for the values that the serializer cannot serialize on its own.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    elif callable(getattr(value, 'to_dict', None)):
        return value.to_dict()
    else:
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def patch_spec(
        target: references.Target,
        applier: outcomes.Applier,
        spec: Any,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> outcomes.Outcome:
    """
    Replace the target's spec with the new one.

    Reports :class:`SerializationError` if the spec cannot be serialized.
    """
    settings = settings if settings is not None else configuration.ClientSettings()
    logger = loggers.get_logger(target, logger)
    try:
        operation = patches.replace(settings.patching.spec_path, spec, default=encode)
    except (TypeError, ValueError) as e:
        logger.debug(f"The spec cannot be serialized: {e}")
        error = outcomes.SerializationError(f"The spec cannot be serialized: {e}")
        error.__cause__ = e
        return outcomes.Outcome(patches=patches.PatchDocument(), apply_fn=None, error=error)
    return documents.assemble(
        [operation],
        target=target,
        applier=applier,
        logger=logger,
    )


def patch_spec_or_raise(
        target: references.Target,
        applier: outcomes.Applier,
        spec: Any,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> tuple[patches.PatchDocument, outcomes.ApplyFn]:
    return patch_spec(target, applier, spec, settings=settings, logger=logger).unwrap()


def patch_spec_fn(
        target: references.Target,
        applier: outcomes.Applier,
        spec: Any,
        *,
        settings: configuration.ClientSettings | None = None,
        logger: typedefs.Logger | None = None,
) -> outcomes.ApplyFn:
    _, apply_fn = patch_spec(target, applier, spec, settings=settings, logger=logger).unwrap()
    return apply_fn
