import logging
import sys
from pathlib import Path
from typing import Callable

import pytest

from actionsdk.application import args_loader, output_writer
from actionsdk.application.args_loader import ArgsLoader
from actionsdk.application.output_writer import OutputWriter


SIGNUP_PAYLOAD = (
    '{"ArgsVersion":1,"Metadata":{"x":5},'
    '"Baggage":{"WorkspaceEvent":{"Event":{"name":"signup","data":{}}},"Actions":{}}}'
)


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Resolve the repository root directory.

    Assumes tests live under <repo>/tests/.
    """
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def signup_payload() -> str:
    """Minimal payload as sent by the orchestrator for a signup event."""
    return SIGNUP_PAYLOAD


@pytest.fixture
def set_argv(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Replace sys.argv with ``["action", *args]``."""

    def _set(*args: str) -> None:
        monkeypatch.setattr(sys, "argv", ["action", *args])

    return _set


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent unit tests from accidentally using developer machine env vars.

    If a test needs an env var, it should set it explicitly via monkeypatch.
    """
    monkeypatch.delenv("ACTIONSDK_LOG_LEVEL", raising=False)
    monkeypatch.delenv("ACTIONSDK_ALLOW_MULTIPLE_WRITES", raising=False)


@pytest.fixture(autouse=True)
def _fresh_process_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test its own payload cache and output writer.

    Both are process-wide in production; without this one test's cached
    payload or written flag would leak into the next.
    """
    monkeypatch.setattr(args_loader, "_default_loader", ArgsLoader())
    monkeypatch.setattr(output_writer, "_default_writer", OutputWriter())


@pytest.fixture(autouse=True)
def _reset_sdk_logging():
    """Remove handlers installed by configure_logging() after each test."""
    yield
    logger = logging.getLogger("actionsdk")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
