import logging

import pytest

from patchutils._core.actions.loggers import LogFormat, ObjectFormatter, ObjectJsonFormatter, \
                                             ObjectPrefixingJsonFormatter, \
                                             ObjectPrefixingTextFormatter, ObjectTextFormatter, \
                                             configure, make_formatter


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    asyncio_logger = logging.getLogger('asyncio')
    saved = (root.handlers[:], root.level, asyncio_logger.handlers[:], asyncio_logger.propagate)
    yield
    root.handlers[:], level, asyncio_logger.handlers[:], asyncio_logger.propagate = saved
    root.setLevel(level)


def _own_formatters():
    return [
        handler.formatter for handler in logging.getLogger().handlers
        if isinstance(handler.formatter, ObjectFormatter)
    ]


@pytest.mark.parametrize('log_format, log_prefix, expected_cls', [
    (LogFormat.FULL, False, ObjectTextFormatter),
    (LogFormat.PLAIN, False, ObjectTextFormatter),
    ('%(message)s', False, ObjectTextFormatter),
    (LogFormat.FULL, True, ObjectPrefixingTextFormatter),
    (LogFormat.PLAIN, True, ObjectPrefixingTextFormatter),
    ('%(message)s', True, ObjectPrefixingTextFormatter),
    (LogFormat.FULL, None, ObjectPrefixingTextFormatter),
    (LogFormat.JSON, False, ObjectJsonFormatter),
    (LogFormat.JSON, True, ObjectPrefixingJsonFormatter),
    (LogFormat.JSON, None, ObjectJsonFormatter),
])
def test_formatter_classes(log_format, log_prefix, expected_cls):
    configure(log_format=log_format, log_prefix=log_prefix)
    formatters = _own_formatters()
    assert len(formatters) == 1
    assert type(formatters[0]) is expected_cls


def test_reconfiguration_replaces_own_handlers():
    configure()
    configure()
    configure(log_format=LogFormat.JSON)
    formatters = _own_formatters()
    assert len(formatters) == 1
    assert type(formatters[0]) is ObjectJsonFormatter


def test_foreign_handlers_are_kept():
    foreign = logging.NullHandler()
    logging.getLogger().addHandler(foreign)
    configure()
    assert foreign in logging.getLogger().handlers


def test_text_format_strings_are_used():
    formatter = make_formatter(log_format='<%(levelname)s> %(message)s', log_prefix=False)
    record = logging.LogRecord('any', logging.INFO, __file__, 1, "hello", None, None)
    assert formatter.format(record) == '<INFO> hello'


def test_unsupported_format_fails():
    with pytest.raises(ValueError):
        make_formatter(log_format=123)  # type: ignore


@pytest.mark.parametrize('kwargs, level', [
    (dict(), logging.INFO),
    (dict(verbose=True), logging.DEBUG),
    (dict(debug=True), logging.DEBUG),
    (dict(quiet=True), logging.WARNING),
])
def test_levels(kwargs, level):
    configure(**kwargs)
    assert logging.getLogger().level == level


def test_asyncio_logs_are_muted_unless_debugging():
    configure()
    asyncio_logger = logging.getLogger('asyncio')
    assert not asyncio_logger.propagate
    assert all(isinstance(h, logging.NullHandler) for h in asyncio_logger.handlers)


def test_asyncio_logs_are_propagated_when_debugging():
    configure(debug=True)
    assert logging.getLogger('asyncio').propagate
