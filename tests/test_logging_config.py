"""Library logging defaults and the opt-in setup_logging helper."""
from __future__ import annotations

import io
import logging

import pytest

import spectralcube
from spectralcube.logging_config import PACKAGE_LOGGER, setup_logging, teardown_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    yield logger
    teardown_logging()


def test_library_is_silent_by_default(package_logger):
    assert spectralcube.__name__ == PACKAGE_LOGGER
    assert any(isinstance(h, logging.NullHandler) for h in package_logger.handlers)
    assert not any(type(h) is logging.StreamHandler for h in package_logger.handlers)


def test_writes_to_host_stream(package_logger):
    stream = io.StringIO()
    handlers = setup_logging(level=logging.DEBUG, stream=stream)

    logging.getLogger("spectralcube.engine.decay").debug("decay step")

    assert len(handlers) == 1
    assert handlers[0] in package_logger.handlers
    text = stream.getvalue()
    assert "Logging initialized." in text
    assert "spectralcube.engine.decay - DEBUG - decay step" in text


def test_writes_log_file(tmp_path, package_logger):
    log_file = tmp_path / "cube.log"
    handlers = setup_logging(level=logging.DEBUG, log_file=str(log_file), stream=io.StringIO())

    logging.getLogger("spectralcube.engine").debug("engine ready")
    for handler in handlers:
        handler.flush()

    assert len(handlers) == 2
    text = log_file.read_text(encoding="utf-8")
    assert "Logging initialized." in text
    assert "engine ready" in text


def test_repeated_setup_replaces_own_handlers(package_logger):
    host_handler = logging.StreamHandler(io.StringIO())
    package_logger.addHandler(host_handler)
    try:
        first = setup_logging(stream=io.StringIO())
        second = setup_logging(stream=io.StringIO())

        assert first[0] not in package_logger.handlers
        assert second[0] in package_logger.handlers
        assert host_handler in package_logger.handlers
        assert package_logger.level == logging.INFO
    finally:
        package_logger.removeHandler(host_handler)


def test_teardown_keeps_null_handler(package_logger):
    setup_logging(stream=io.StringIO())
    teardown_logging()

    assert package_logger.level == logging.NOTSET
    assert [type(h) for h in package_logger.handlers] == [logging.NullHandler]
