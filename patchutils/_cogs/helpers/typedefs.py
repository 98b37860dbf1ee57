"""
Type aliases for the loggers, valid both at runtime and for the type-checkers.

``logging.LoggerAdapter`` is generic in the type stubs only, and cannot be
subscripted at runtime, hence the split.
"""
import logging
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# Anything that the builders & appliers can log to: a plain logger or a per-object adapter.
Logger = Union[logging.Logger, LoggerAdapter]
