"""Lazy, parse-once access to the invocation payload.

The orchestrator passes a JSON document as the first positional argument.
It is decoded on first access and cached for the rest of the process; the
arguments of a process never change, so later calls return the same
``Args`` instance without looking at argv again.
"""

import logging
import sys
import threading
from collections.abc import Sequence

from pydantic import ValidationError
from pydantic_core import from_json

from actionsdk.domain.constants import PAYLOAD_ARG_INDEX
from actionsdk.domain.errors import MalformedPayloadError, MissingArgumentsError
from actionsdk.domain.models.args import Args

logger = logging.getLogger(__name__)


class ArgsLoader:
    """Parse-once cell holding the decoded payload."""

    def __init__(self, argv: Sequence[str] | None = None) -> None:
        """
        Args:
            argv: Argument vector to read from. Defaults to ``sys.argv``,
                looked up when the payload is first loaded.
        """
        self._argv = argv
        self._args: Args | None = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._args is not None

    def load(self) -> Args:
        """
        Return the decoded payload, parsing it on first use.

        Raises:
            MissingArgumentsError: If no payload argument was passed
            MalformedPayloadError: If the payload is not valid JSON or has the wrong shape
        """
        args = self._args
        if args is not None:
            return args

        # Concurrent first calls collapse into a single parse.
        with self._lock:
            if self._args is None:
                self._args = self._parse(self._read_payload())
            return self._args

    def reset(self) -> None:
        """Drop the cached payload so the next load parses again."""
        with self._lock:
            self._args = None

    def _read_payload(self) -> str:
        argv = sys.argv if self._argv is None else self._argv
        if len(argv) <= PAYLOAD_ARG_INDEX:
            raise MissingArgumentsError("no arguments present")
        return argv[PAYLOAD_ARG_INDEX]

    @staticmethod
    def _parse(raw: str) -> Args:
        try:
            args = Args.model_validate_json(raw)
        except ValidationError as e:
            raise MalformedPayloadError(f"unable to parse arguments: {e}", cause=e) from e

        # pydantic accepts NaN and Infinity literals, which are not JSON.
        try:
            from_json(raw, allow_inf_nan=False)
        except ValueError as e:
            raise MalformedPayloadError(f"unable to parse arguments: {e}", cause=e) from e

        logger.debug(
            f"Loaded payload: args_version={args.args_version} "
            f"event={args.event.name!r} prior_actions={len(args.baggage.actions)}"
        )
        return args


_default_loader = ArgsLoader()


def default_loader() -> ArgsLoader:
    """Return the process-wide loader used by the module-level helpers."""
    return _default_loader


def get_args() -> Args:
    """Return the invocation payload of this process."""
    return _default_loader.load()
