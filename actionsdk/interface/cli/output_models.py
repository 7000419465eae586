from typing import Literal

from pydantic import BaseModel, JsonValue


class BaseOutput(BaseModel):
    schema_version: int = 1
    command: Literal["payload", "invoke"]
    exit_code: int
    error: str | None = None


class PayloadOutput(BaseOutput):
    command: Literal["payload"] = "payload"
    # Wire form of the payload; omitted on error via exclude_none.
    payload: dict[str, JsonValue] | None = None


class InvokeOutput(BaseOutput):
    command: Literal["invoke"] = "invoke"
    result: JsonValue = None
    action_error: str | None = None
    output_error: str | None = None
    stderr: str | None = None
