"""
Detecting the library's own version.

The codebase does not contain the version directly. It is taken from
the installed distribution's metadata once at startup when the code is loaded.
"""
import importlib.metadata

version: str | None = None

try:
    name, *_ = __name__.split('.')  # usually "patchutils", unless renamed/forked.
    version = importlib.metadata.version(name)
except importlib.metadata.PackageNotFoundError:
    pass  # not installed: e.g. used from a source checkout.
