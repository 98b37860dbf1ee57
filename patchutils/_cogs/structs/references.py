"""
References to the resource kinds and to the individual objects to be patched.
"""
import dataclasses
from typing import Any, NewType

# A real namespace of a real object, as opposed to arbitrary strings.
NamespaceName = NewType('NamespaceName', str)

# A namespace of an object, or `None` for the cluster-scoped objects.
Namespace = NamespaceName | None


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Resource:
    """
    A resource kind, as addressed in K8s API: e.g. ``widgets.v1.example.com``.

    Only the group, the version, and the plural name identify the resource.
    The kind is informational (e.g. for logging), and the scope
    only affects the URLs of the objects.
    """

    group: str  # e.g. "example.com", "apps"; or "" for the core v1 resources.
    version: str  # e.g. "v1", "v1beta1".
    plural: str  # e.g. "widgets", "namespaces": the endpoint in the URLs.
    kind: str | None = None  # e.g. "Widget", "Namespace".
    namespaced: bool = True

    def __hash__(self) -> int:
        return hash(self._identity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return self._identity == other._identity

    def __repr__(self) -> str:
        return '.'.join(part for part in (self.plural, self.version, self.group) if part)

    @property
    def _identity(self) -> tuple[str, str, str]:
        return (self.group, self.version, self.plural)

    @property
    def api_version(self) -> str:
        """ The ``apiVersion`` of the objects: ``group/version`` or just ``version`` for core. """
        return f'{self.group}/{self.version}' if self.group else self.version

    def get_url(
            self,
            *,
            server: str | None = None,
            namespace: Namespace = None,
            name: str | None = None,
    ) -> str:
        """
        Build a URL of the resource's list or of an individual object in it.

        Without the server, the URL is relative to the server's root.
        The namespaced objects need a namespace; the cluster-scoped ones reject it.
        Without the namespace, a namespaced resource's URL is cluster-wide (lists only).
        """
        if namespace is not None and not self.namespaced:
            raise ValueError(f"Cluster-scoped {self!r} cannot have a namespace.")
        if namespace is None and name is not None and self.namespaced:
            raise ValueError(f"Namespaced {self!r} requires a namespace for a specific object.")

        is_core = self.group == '' and self.version == 'v1'
        segments = ['api'] if is_core else ['apis', self.group]
        segments.append(self.version)
        if namespace is not None:
            segments.extend(['namespaces', namespace])
        segments.append(self.plural)
        if name is not None:
            segments.append(name)

        url = "/" + "/".join(segment for segment in segments if segment)
        return url if server is None else server.rstrip('/') + url


@dataclasses.dataclass(frozen=True)
class Target:
    """
    A specific object to be patched: the resource kind, the name, the namespace.

    This is all that the appliers need to know about the object. The object's
    body is not remembered: the patches are generated from the explicitly
    passed snapshots of the object's fields, not from the object itself.
    """
    resource: Resource
    name: str
    namespace: Namespace = None

    def __str__(self) -> str:
        return f'{self.namespace}/{self.name}' if self.namespace else self.name

    def get_url(self, *, server: str | None = None) -> str:
        return self.resource.get_url(server=server, namespace=self.namespace, name=self.name)

    def as_ref(self) -> dict[str, Any]:
        """ The same structure as ``ObjectReference`` of K8s API; e.g. for logging. """
        return dict(
            apiVersion=self.resource.api_version,
            kind=self.resource.kind,
            name=self.name,
            namespace=self.namespace,
        )
