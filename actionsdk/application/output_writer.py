"""Action output protocol.

An action reports back to the orchestrator by writing exactly one JSON value
to stdout: either its result, or an error envelope ``{"error": "..."}``.
Nothing else is framed or appended, not even a newline.

Writing an error does not stop the action. To stop it and halt the workflow
branch, exit with ``ExitCode.FAILURE``; to stop it but let the workflow
continue, exit with ``ExitCode.SUCCESS``.
"""

import logging
import sys
import threading
from typing import Any, NoReturn, TextIO

from pydantic_core import PydanticSerializationError, from_json, to_json

from actionsdk.application.config_loader import runtime_settings
from actionsdk.domain.constants import EMPTY_RESULT, ExitCode
from actionsdk.domain.errors import (
    OutputAlreadyWrittenError,
    ResultEncodingError,
    ResultWriteError,
)
from actionsdk.domain.models.output import ErrorOutput

logger = logging.getLogger(__name__)


class OutputWriter:
    """Writes the single result or error value of an action."""

    def __init__(self, stream: TextIO | None = None, *, strict: bool | None = None) -> None:
        """
        Args:
            stream: Destination stream. Defaults to ``sys.stdout``, looked
                up at write time.
            strict: Reject a second write. ``None`` defers to the
                ACTIONSDK_ALLOW_MULTIPLE_WRITES environment variable.
        """
        self._stream = stream
        self._strict = strict
        self._written = False
        self._lock = threading.Lock()

    @property
    def written(self) -> bool:
        return self._written

    @property
    def strict(self) -> bool:
        if self._strict is not None:
            return self._strict
        return not runtime_settings().allow_multiple_writes

    def write_result(self, value: Any = None) -> None:
        """
        Write the action result as compact JSON.

        Any data written here becomes the action's output in the workflow
        context, available to later actions. ``None`` writes ``{}``.

        Raises:
            ResultEncodingError: If the value cannot be serialized
            ResultWriteError: If the stream rejects the write
            OutputAlreadyWrittenError: If output was already written in strict mode
        """
        payload = EMPTY_RESULT if value is None else self._encode(value)
        self._emit(payload)

    def write_error(self, err: BaseException | str) -> None:
        """
        Write ``{"error": str(err)}``.

        This is the last channel back to the orchestrator, so a failure here
        is logged and terminates the process with ``ExitCode.FAILURE``.
        """
        try:
            payload = ErrorOutput.from_exception(err).model_dump_json()
        except Exception as e:
            self._fatal(f"unable to marshal error: {e}")

        try:
            self._emit(payload)
        except ResultWriteError as e:
            self._fatal(f"unable to write error: {e}")

    @staticmethod
    def _encode(value: Any) -> str:
        try:
            payload = to_json(value, by_alias=True)
            # NaN and Infinity serialize as bare constants, which are not JSON.
            from_json(payload, allow_inf_nan=False)
        except (PydanticSerializationError, ValueError) as e:
            raise ResultEncodingError(f"error writing output: {e}", cause=e) from e
        return payload.decode("utf-8")

    def _emit(self, payload: str) -> None:
        with self._lock:
            if self._written:
                if self.strict:
                    raise OutputAlreadyWrittenError(
                        "output already written; the orchestrator accepts a single JSON value"
                    )
                logger.warning("Output written more than once; the orchestrator may fail to parse it")

            stream = self._stream if self._stream is not None else sys.stdout
            try:
                stream.write(payload)
                # Anything past this point may already be on the stream.
                self._written = True
                stream.flush()
            except (OSError, ValueError) as e:
                raise ResultWriteError(f"unable to write output: {e}", cause=e) from e

    @staticmethod
    def _fatal(message: str) -> NoReturn:
        logger.critical(message)
        sys.exit(ExitCode.FAILURE)


_default_writer = OutputWriter()


def default_writer() -> OutputWriter:
    """Return the process-wide writer used by the module-level helpers."""
    return _default_writer


def write_result(value: Any = None) -> None:
    """Write the action result to stdout. See ``OutputWriter.write_result``."""
    _default_writer.write_result(value)


def write_error(err: BaseException | str) -> None:
    """Write an error envelope to stdout. See ``OutputWriter.write_error``."""
    _default_writer.write_error(err)
