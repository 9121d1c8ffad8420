import io
import json
import logging

import numpy as np
import pytest

from fractalrisk.logging_conf import PACKAGE_LOGGER, configure_logging, log_warnings
from fractalrisk.scaling import build_curve


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_package_is_silent_by_default():
    handlers = logging.getLogger(PACKAGE_LOGGER).handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)


def test_plain_formatter(package_logger):
    stream = io.StringIO()
    configure_logging(logging.DEBUG, stream=stream)
    build_curve(np.random.default_rng(0).normal(0, 0.01, 500), [1, 2, 5], 0.95)
    out = stream.getvalue()
    assert "| DEBUG | fractalrisk.scaling.curve |" in out


def test_structured_formatter(package_logger):
    stream = io.StringIO()
    configure_logging(logging.INFO, structured=True, stream=stream, context={"run": "unit"})
    logging.getLogger("fractalrisk.test").info("hello", extra={"h": 5})
    payload = json.loads(stream.getvalue().strip())
    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["run"] == "unit"
    assert payload["h"] == 5


def test_reconfiguring_replaces_handler(package_logger):
    configure_logging(stream=io.StringIO())
    configure_logging(stream=io.StringIO())
    stream_handlers = [
        h for h in package_logger.handlers if isinstance(h, logging.StreamHandler)
    ]
    assert len(stream_handlers) == 1


def test_log_warnings(caplog):
    x = np.random.default_rng(1).normal(0, 0.01, 200)
    curve = build_curve(x, [1, 5, 300], 0.95)
    with caplog.at_level(logging.WARNING, logger=PACKAGE_LOGGER):
        n = log_warnings(curve)
    assert n == len(curve.warnings) == 1
    assert "h=300" in caplog.records[0].getMessage()
    assert caplog.records[0].getMessage().startswith("ScalingCurve:")
