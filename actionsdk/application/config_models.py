"""Configuration models.

Two layers of configuration exist:

- Runtime settings, read from environment variables inside the action
  process. The orchestrator controls that environment, so nothing is read
  from disk there.
- Harness config, read from YAML by the developer-side CLI that plays the
  orchestrator locally (see ``actionsdk invoke``).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from actionsdk.domain.constants import CURRENT_ARGS_VERSION


class RuntimeSettings(BaseModel):
    """Settings the SDK honours inside an action process."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    log_level: str | None = None
    allow_multiple_writes: bool = False

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v2 = v.strip().upper()
        return v2 or None


class HarnessConfig(BaseModel):
    """Developer-side configuration for local action invocation."""

    model_config = ConfigDict(extra="forbid")

    secrets: dict[str, str] = Field(default_factory=dict)
    timeout: float | None = None
    args_version: int = CURRENT_ARGS_VERSION
    allow_multiple_writes: bool = False

    @field_validator("timeout")
    @classmethod
    def _timeout_positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("timeout must be > 0")
        return v
