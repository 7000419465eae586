"""Output envelope models."""

from pydantic import BaseModel, ConfigDict


class ErrorOutput(BaseModel):
    """Error envelope written to stdout: ``{"error": "<message>"}``."""

    model_config = ConfigDict(frozen=True)

    error: str

    @classmethod
    def from_exception(cls, err: BaseException) -> "ErrorOutput":
        return cls(error=str(err))
