"""Tests for the single-write output protocol."""

import io
import logging
from dataclasses import dataclass

import pytest
from pydantic import BaseModel, Field

from actionsdk.application.output_writer import (
    OutputWriter,
    default_writer,
    write_error,
    write_result,
)
from actionsdk.domain.errors import (
    OutputAlreadyWrittenError,
    ResultEncodingError,
    ResultWriteError,
    SecretNotFoundError,
)


class Notification(BaseModel):
    message_id: str = Field(alias="messageId")
    delivered: bool


@dataclass
class Count:
    total: int


class TestWriteResult:
    def test_none_writes_empty_object(self, capsys: pytest.CaptureFixture[str]) -> None:
        write_result()
        assert capsys.readouterr().out == "{}"

    def test_explicit_none_writes_empty_object(self, capsys: pytest.CaptureFixture[str]) -> None:
        write_result(None)
        assert capsys.readouterr().out == "{}"

    def test_dict_written_compactly(self, capsys: pytest.CaptureFixture[str]) -> None:
        write_result({"a": 1})
        assert capsys.readouterr().out == '{"a":1}'

    def test_nested_value(self) -> None:
        stream = io.StringIO()
        OutputWriter(stream).write_result({"items": [1, "two", None], "ok": True})
        assert stream.getvalue() == '{"items":[1,"two",null],"ok":true}'

    def test_model_dumped_by_alias(self) -> None:
        stream = io.StringIO()
        OutputWriter(stream).write_result(Notification(messageId="m1", delivered=True))
        assert stream.getvalue() == '{"messageId":"m1","delivered":true}'

    def test_dataclass(self) -> None:
        stream = io.StringIO()
        OutputWriter(stream).write_result(Count(total=3))
        assert stream.getvalue() == '{"total":3}'

    def test_scalar(self) -> None:
        stream = io.StringIO()
        OutputWriter(stream).write_result("done")
        assert stream.getvalue() == '"done"'

    def test_unserializable_value(self) -> None:
        stream = io.StringIO()
        writer = OutputWriter(stream)

        with pytest.raises(ResultEncodingError) as exc_info:
            writer.write_result({"handle": object()})

        assert str(exc_info.value).startswith("error writing output: ")
        assert stream.getvalue() == ""
        assert not writer.written

    def test_nan_rejected(self) -> None:
        """Non-finite floats have no JSON form."""
        stream = io.StringIO()
        writer = OutputWriter(stream)

        with pytest.raises(ResultEncodingError):
            writer.write_result({"ratio": float("nan")})

        assert stream.getvalue() == ""
        assert not writer.written

    def test_infinity_in_model_rejected(self) -> None:
        class Score(BaseModel):
            value: float

        stream = io.StringIO()
        with pytest.raises(ResultEncodingError):
            OutputWriter(stream).write_result([Score(value=float("-inf"))])

        assert stream.getvalue() == ""

    def test_closed_stream(self) -> None:
        stream = io.StringIO()
        stream.close()

        with pytest.raises(ResultWriteError):
            OutputWriter(stream).write_result({"a": 1})

    def test_stream_oserror(self) -> None:
        class BrokenPipe(io.StringIO):
            def write(self, s: str) -> int:
                raise BrokenPipeError("pipe closed")

        with pytest.raises(ResultWriteError) as exc_info:
            OutputWriter(BrokenPipe()).write_result({"a": 1})

        assert isinstance(exc_info.value.cause, BrokenPipeError)


class TestSingleWrite:
    def test_second_write_rejected(self) -> None:
        stream = io.StringIO()
        writer = OutputWriter(stream, strict=True)
        writer.write_result({"a": 1})

        with pytest.raises(OutputAlreadyWrittenError):
            writer.write_result({"b": 2})

        assert stream.getvalue() == '{"a":1}'

    def test_default_writer_is_strict(self, capsys: pytest.CaptureFixture[str]) -> None:
        write_result({"a": 1})
        with pytest.raises(OutputAlreadyWrittenError):
            write_result({"a": 2})
        assert capsys.readouterr().out == '{"a":1}'

    def test_non_strict_concatenates_and_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        stream = io.StringIO()
        writer = OutputWriter(stream, strict=False)

        with caplog.at_level(logging.WARNING, logger="actionsdk"):
            writer.write_result({"a": 1})
            writer.write_result()

        assert stream.getvalue() == '{"a":1}{}'
        assert "more than once" in caplog.text

    def test_env_disables_strict_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ACTIONSDK_ALLOW_MULTIPLE_WRITES", "1")
        writer = OutputWriter(io.StringIO())
        assert writer.strict is False

    def test_explicit_strict_wins_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ACTIONSDK_ALLOW_MULTIPLE_WRITES", "true")
        assert OutputWriter(io.StringIO(), strict=True).strict is True

    def test_failed_flush_still_counts_as_written(self) -> None:
        """Once the payload reached the stream a retry must not append another."""

        class FlushFails(io.StringIO):
            def flush(self) -> None:
                raise OSError("flush failed")

        stream = FlushFails()
        writer = OutputWriter(stream, strict=True)

        with pytest.raises(ResultWriteError):
            writer.write_result({"a": 1})
        with pytest.raises(OutputAlreadyWrittenError):
            writer.write_result({"a": 1})

        assert stream.getvalue() == '{"a":1}'

    def test_written_flag(self) -> None:
        writer = OutputWriter(io.StringIO())
        assert not writer.written
        writer.write_result()
        assert writer.written


class TestWriteError:
    def test_error_envelope(self, capsys: pytest.CaptureFixture[str]) -> None:
        write_error(ValueError("secret not found: FOO"))
        assert capsys.readouterr().out == '{"error":"secret not found: FOO"}'

    def test_sdk_error(self) -> None:
        stream = io.StringIO()
        OutputWriter(stream).write_error(SecretNotFoundError("FOO"))
        assert stream.getvalue() == '{"error":"secret not found: FOO"}'

    def test_plain_string(self) -> None:
        stream = io.StringIO()
        OutputWriter(stream).write_error("rate limited")
        assert stream.getvalue() == '{"error":"rate limited"}'

    def test_quotes_escaped(self) -> None:
        stream = io.StringIO()
        OutputWriter(stream).write_error(ValueError('bad "input"'))
        assert stream.getvalue() == '{"error":"bad \\"input\\""}'

    def test_does_not_exit(self) -> None:
        """Writing an error leaves the exit decision to the action."""
        stream = io.StringIO()
        OutputWriter(stream).write_error(ValueError("boom"))
        assert stream.getvalue() == '{"error":"boom"}'

    def test_write_failure_is_fatal(self, caplog: pytest.LogCaptureFixture) -> None:
        stream = io.StringIO()
        stream.close()

        with caplog.at_level(logging.CRITICAL, logger="actionsdk"):
            with pytest.raises(SystemExit) as exc_info:
                OutputWriter(stream).write_error(ValueError("boom"))

        assert exc_info.value.code == 1
        assert "unable to write error" in caplog.text

    def test_unprintable_error_is_fatal(self, caplog: pytest.LogCaptureFixture) -> None:
        class Unprintable(Exception):
            def __str__(self) -> str:
                raise RuntimeError("no message")

        stream = io.StringIO()
        with caplog.at_level(logging.CRITICAL, logger="actionsdk"):
            with pytest.raises(SystemExit) as exc_info:
                OutputWriter(stream).write_error(Unprintable())

        assert exc_info.value.code == 1
        assert "unable to marshal error" in caplog.text
        assert stream.getvalue() == ""

    def test_error_after_result_is_fatal_in_strict_mode(self) -> None:
        stream = io.StringIO()
        writer = OutputWriter(stream, strict=True)
        writer.write_result({"a": 1})

        with pytest.raises(SystemExit):
            writer.write_error(ValueError("late"))

        assert stream.getvalue() == '{"a":1}'

    def test_default_writer_shared(self, capsys: pytest.CaptureFixture[str]) -> None:
        write_error(ValueError("x"))
        assert default_writer().written
