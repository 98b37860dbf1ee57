"""
All the structures needed for the JSON patching (RFC 6902).

Every operation is serialized at the moment of its creation and is kept
as an opaque JSON string afterwards: the operations are produced only to be
sent to the server as one array, so there is no need to re-serialize them.
The decoded forms are available for logging, assertions, and introspection.

Only a subset of the RFC is used: ``add``, ``replace``, ``remove``.
The ``path`` is always an absolute JSON Pointer; the ``value`` is present
for ``add`` & ``replace`` only.
"""
import dataclasses
import json
from collections.abc import Callable, Iterable
from typing import Any, Literal, Tuple, TypedDict

JSONPatchOp = Literal["add", "replace", "remove"]


class JSONPatchItem(TypedDict, total=False):
    op: JSONPatchOp
    path: str
    value: Any


JSONPatch = list[JSONPatchItem]

# A converter of the otherwise non-serializable values, as in `json.dumps(default=...)`.
Encoder = Callable[[Any], Any]


@dataclasses.dataclass(frozen=True)
class PatchOperation:
    """
    A single serialized JSON Patch operation, e.g. ``{"op": "remove", "path": "/a"}``.
    """
    raw: str

    def __str__(self) -> str:
        return self.raw

    def as_dict(self) -> JSONPatchItem:
        item: JSONPatchItem = json.loads(self.raw)
        return item

    @property
    def op(self) -> JSONPatchOp:
        return self.as_dict()['op']

    @property
    def path(self) -> str:
        return self.as_dict()['path']

    @property
    def value(self) -> Any:
        return self.as_dict().get('value')


def add(path: str, value: Any, *, default: Encoder | None = None) -> PatchOperation:
    return _make('add', path, value=value, default=default)


def replace(path: str, value: Any, *, default: Encoder | None = None) -> PatchOperation:
    return _make('replace', path, value=value, default=default)


def remove(path: str) -> PatchOperation:
    return _make('remove', path)


def _make(
        op: JSONPatchOp,
        path: str,
        *,
        default: Encoder | None = None,
        **kwargs: Any,  # "value", if any: to distinguish from the literal `None` values.
) -> PatchOperation:
    # NaN/Infinity are not JSON, and the servers reject them; so fail early & locally.
    item = dict(op=op, path=path, **kwargs)
    return PatchOperation(json.dumps(item, default=default, allow_nan=False))


class PatchDocument(Tuple[PatchOperation, ...]):
    """
    An ordered & immutable sequence of operations, applied left to right.

    The order of the operations is the order of their emission by the builders.
    Later operations can depend on the earlier ones (e.g. on a container
    created by the first operation), so the order must never change.
    """

    def __new__(cls, operations: Iterable[PatchOperation] = ()) -> "PatchDocument":
        return super().__new__(cls, operations)

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({list(self)!r})'

    def serialize(self) -> bytes:
        """ The JSON array of all operations, ready to be sent as the request body. """
        return ('[' + ','.join(operation.raw for operation in self) + ']').encode('utf-8')

    def as_json_patch(self) -> JSONPatch:
        return [operation.as_dict() for operation in self]
