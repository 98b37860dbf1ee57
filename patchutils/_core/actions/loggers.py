"""
Logging of the patch generation & application, with the target objects' identities.

All messages about a specific object go through :class:`TargetLogger`,
which attaches the object's reference to the log records. The formatters
then either prefix the messages with ``[namespace/name]`` (text formats),
or put the reference into a separate field (JSON format) for the log parsers.

The library itself never configures the logging: it is the application's
duty. :func:`configure` is only a shortcut for the CLI and for the scripts.
"""
import copy
import enum
import logging
from collections.abc import Mapping, MutableMapping
from typing import TYPE_CHECKING, Any, TextIO

try:
    # python-json-logger>=3.1.0
    from pythonjsonlogger.core import RESERVED_ATTRS as _pjl_RESERVED_ATTRS
    from pythonjsonlogger.json import JsonFormatter as _pjl_JsonFormatter
except ImportError:
    # python-json-logger<3.1.0
    from pythonjsonlogger.jsonlogger import JsonFormatter as _pjl_JsonFormatter  # type: ignore
    from pythonjsonlogger.jsonlogger import RESERVED_ATTRS as _pjl_RESERVED_ATTRS  # type: ignore

from patchutils._cogs.helpers import typedefs
from patchutils._cogs.structs import references

logger = logging.getLogger('patchutils.objects')

# The record's attribute with the object reference, as put by the target loggers.
REF_ATTR = 'k8s_ref'

# The field of the JSON logs with the object reference, unless overridden.
DEFAULT_JSON_REFKEY = 'object'


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # a marker only, never used as a format string


def get_ref(record: logging.LogRecord) -> Mapping[str, Any] | None:
    return getattr(record, REF_ATTR, None)


def get_severity(levelno: int) -> str:
    """ The severity names as understood by the log collectors (e.g. Stackdriver). """
    for limit, severity in [(logging.DEBUG, "debug"), (logging.INFO, "info"),
                            (logging.WARNING, "warn"), (logging.ERROR, "error")]:
        if levelno <= limit:
            return severity
    return "fatal"


class ObjectFormatter(logging.Formatter):
    """ A marker for our own formatters, to recognise our own handlers. """


class ObjectTextFormatter(ObjectFormatter, logging.Formatter):
    pass


class ObjectJsonFormatter(ObjectFormatter, _pjl_JsonFormatter):
    """
    Render the records as JSON, with the object reference in its own field.
    """

    def __init__(self, *args: Any, refkey: str | None = None, **kwargs: Any) -> None:
        # The reference goes under the refkey only, never under its attribute name.
        reserved_attrs = set(kwargs.pop('reserved_attrs', _pjl_RESERVED_ATTRS)) | {REF_ATTR}
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, reserved_attrs=reserved_attrs, **kwargs)
        self._refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: dict[str, object],
            record: logging.LogRecord,
            message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        ref = get_ref(record)
        if ref is not None:
            log_record[self._refkey] = ref
        log_record.setdefault('severity', get_severity(record.levelno))


class ObjectPrefixingMixin(ObjectFormatter):
    """ Prepend the messages with ``[namespace/name]`` or ``[name]`` of the object. """

    def format(self, record: logging.LogRecord) -> str:
        ref = get_ref(record)
        if ref is not None:
            name = ref.get('name') or ''
            namespace = ref.get('namespace')
            prefix = f"[{namespace}/{name}]" if namespace else f"[{name}]"
            record = copy.copy(record)  # other handlers must see the original message
            record.msg = f"{prefix} {record.msg}"
        return super().format(record)


class ObjectPrefixingTextFormatter(ObjectPrefixingMixin, ObjectTextFormatter):
    pass


class ObjectPrefixingJsonFormatter(ObjectPrefixingMixin, ObjectJsonFormatter):
    pass


class TargetLogger(typedefs.LoggerAdapter):
    """
    A per-object logger: the records carry the target's reference for the formatters.

    The reference has the same fields as ``ObjectReference`` in K8s API.
    """

    def __init__(self, target: references.Target, *, base: logging.Logger = logger) -> None:
        super().__init__(base, {REF_ATTR: target.as_ref()})

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        # LoggerAdapter replaces the per-call extras with its own; keep both instead.
        kwargs["extra"] = dict(self.extra or {}, **kwargs.get('extra', {}))
        return msg, kwargs


def get_logger(target: references.Target, logger: typedefs.Logger | None = None) -> typedefs.Logger:
    """ Use the explicitly passed logger as is, or make a per-target one. """
    return logger if logger is not None else TargetLogger(target)


# Our own handlers are replaced on re-configuration; the others are left intact.
if TYPE_CHECKING:
    class _PatchUtilsStreamHandler(logging.StreamHandler[TextIO]):
        pass
else:
    class _PatchUtilsStreamHandler(logging.StreamHandler):
        pass


def configure(
        debug: bool | None = None,
        verbose: bool | None = None,
        quiet: bool | None = None,
        log_format: LogFormat | str = LogFormat.FULL,
        log_prefix: bool | None = False,
        log_refkey: str | None = None,
) -> None:
    """
    Log to stderr in the chosen format; the root logger's level follows the flags.
    """
    handler = _PatchUtilsStreamHandler()
    handler.setFormatter(make_formatter(log_format=log_format, log_prefix=log_prefix,
                                        log_refkey=log_refkey))

    root = logging.getLogger()
    root.handlers[:] = [h for h in root.handlers if not isinstance(h, _PatchUtilsStreamHandler)]
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug or verbose else logging.WARNING if quiet else logging.INFO)

    # The event loop's own chatter is only interesting when debugging.
    asyncio_logger = logging.getLogger('asyncio')
    asyncio_logger.propagate = bool(debug)
    if not debug:
        asyncio_logger.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: LogFormat | str = LogFormat.FULL,
        log_prefix: bool | None = False,
        log_refkey: str | None = None,
) -> ObjectFormatter:
    """
    Build a formatter for the format; ``log_prefix=None`` means prefixing unless in JSON.
    """
    if log_prefix is None:
        log_prefix = log_format is not LogFormat.JSON

    match log_format:
        case LogFormat.JSON if log_prefix:
            return ObjectPrefixingJsonFormatter(refkey=log_refkey)
        case LogFormat.JSON:
            return ObjectJsonFormatter(refkey=log_refkey)
        case LogFormat() | str():
            fmt = log_format.value if isinstance(log_format, LogFormat) else log_format
            cls = ObjectPrefixingTextFormatter if log_prefix else ObjectTextFormatter
            return cls(fmt)
        case _:
            raise ValueError(f"Unsupported log format: {log_format!r}")
