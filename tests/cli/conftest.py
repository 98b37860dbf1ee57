import logging

import click.testing
import pytest


@pytest.fixture(autouse=True)
def _restore_logging():
    # The commands configure the logging with the streams of the runner, which are closed after.
    logger = logging.getLogger()
    handlers = logger.handlers[:]
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture()
def runner():
    return click.testing.CliRunner()


@pytest.fixture()
def body_file(tmp_path):
    def factory(text, name='body.yaml'):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return factory
