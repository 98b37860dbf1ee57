"""
All the structures coming from the Kubernetes API, and the read-only access to them.

The objects are plain JSON-decoded dicts, as fetched from the API or loaded
from YAML files. Only the fields used for the patch generation are declared;
all other fields are allowed at runtime, but are not type-checked.

The accessors keep the distinction between an absent field (``None``)
and an empty one (``[]`` or ``{}``): e.g. for the finalizers, it makes
a difference in how the first finalizer is added.
"""
from collections.abc import Mapping
from typing import Any, TypedDict, cast

from patchutils._cogs.structs import references

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    finalizers: list[str]
    resourceVersion: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


def get_meta(body: RawBody) -> RawMeta:
    return cast(RawMeta, body.get('metadata') or {})


def get_labels(body: RawBody) -> Labels | None:
    return get_meta(body).get('labels')


def get_annotations(body: RawBody) -> Annotations | None:
    return get_meta(body).get('annotations')


def get_finalizers(body: RawBody) -> list[str] | None:
    return get_meta(body).get('finalizers')


def get_spec(body: RawBody) -> Mapping[str, Any] | None:
    return body.get('spec')


def build_target(resource: references.Resource, body: RawBody) -> references.Target:
    """ Identify the object from its own body, for the patch to be applied to it. """
    meta = get_meta(body)
    name = meta.get('name')
    if not name:
        raise ValueError("The object has no name, so it cannot be patched.")
    namespace = meta.get('namespace') if resource.namespaced else None
    return references.Target(
        resource=resource,
        name=name,
        namespace=references.NamespaceName(namespace) if namespace else None,
    )
