from __future__ import annotations

import io
import logging

import pytest

from kak_bridge.config import Settings
from kak_bridge.logging_utils import PACKAGE_LOGGER, InvocationContextFilter

HOST = ("/usr/local/bin/kak-plugin",)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "KAK_BRIDGE_HOST_COMMAND",
        "KAK_BRIDGE_LOG_LEVEL",
        "KAK_BRIDGE_LOG_FILE",
        "KAK_BRIDGE_QUOTE_STYLE",
        "KAK_BRIDGE_FAIL_PREFIX",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for flt in [flt for flt in logger.filters if isinstance(flt, InvocationContextFilter)]:
        logger.removeFilter(flt)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def settings() -> Settings:
    return Settings(host_command=HOST)


@pytest.fixture
def stdout() -> io.StringIO:
    return io.StringIO()
