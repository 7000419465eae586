"""Local orchestrator stand-in.

Builds an invocation payload from a fixture file, runs an action command
with it as a child process, and reads the action's single JSON output back,
the same way the workflow engine does.
"""

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, JsonValue, NonNegativeInt, ValidationError
from pydantic_core import from_json

from actionsdk.application.config_loader import ConfigLoadError, load_yaml_mapping
from actionsdk.domain.constants import CURRENT_ARGS_VERSION, ERROR_KEY
from actionsdk.domain.errors import ActionSDKError
from actionsdk.domain.models.args import Args, Baggage, Event, EventWrapper

logger = logging.getLogger(__name__)


class ActionRunError(ActionSDKError):
    """Raised when an action could not be run or its output could not be read."""

    pass


class InvocationFixture(BaseModel):
    """Developer-authored description of one action invocation.

    Example (YAML):
        metadata:
          channel: "#signups"
        event:
          name: signup
          data: {email: "a@example.com"}
        actions:
          1: {status: ok}
        secrets:
          SLACK_TOKEN: xoxb-test
    """

    model_config = ConfigDict(extra="forbid")

    args_version: int | None = None
    metadata: JsonValue = None
    event: Event = Field(default_factory=Event)
    actions: dict[NonNegativeInt, dict[str, JsonValue]] = Field(default_factory=dict)
    secrets: dict[str, str] = Field(default_factory=dict)


class ActionOutput(BaseModel):
    """The JSON value an action wrote to stdout."""

    value: JsonValue = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


class ActionRun(BaseModel):
    """Outcome of running one action process."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    output: ActionOutput | None = None
    output_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def load_fixture(path: Path) -> InvocationFixture:
    """Load a YAML (or JSON) invocation fixture."""
    data = load_yaml_mapping(path, missing_ok=False)
    try:
        return InvocationFixture.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError("Invalid invocation fixture", path=path, cause=e) from e


def build_payload(fixture: InvocationFixture, *, args_version: int = CURRENT_ARGS_VERSION) -> Args:
    """Assemble the payload the orchestrator would pass for ``fixture``."""
    return Args(
        args_version=fixture.args_version if fixture.args_version is not None else args_version,
        metadata=fixture.metadata,
        baggage=Baggage(
            event_wrapper=EventWrapper(event=fixture.event),
            actions=fixture.actions,
        ),
    )


def parse_action_output(stdout: str) -> ActionOutput:
    """
    Interpret action stdout as a single JSON value.

    Empty output counts as no result. A lone ``{"error": "<str>"}`` object is
    the error envelope; anything else is the result.

    Raises:
        ActionRunError: If stdout is not exactly one JSON value
    """
    text = stdout.strip()
    if not text:
        return ActionOutput()

    try:
        value = from_json(text, allow_inf_nan=False)
    except ValueError as e:
        raise ActionRunError(f"action output is not a single JSON value: {e}", cause=e) from e

    if isinstance(value, dict) and set(value) == {ERROR_KEY} and isinstance(value[ERROR_KEY], str):
        return ActionOutput(error=value[ERROR_KEY])
    return ActionOutput(value=value)


def run_action(
    command: Sequence[str],
    args: Args,
    *,
    secrets: Mapping[str, str] | None = None,
    timeout: float | None = None,
    cwd: Path | None = None,
    base_env: Mapping[str, str] | None = None,
) -> ActionRun:
    """
    Run ``command`` with the serialized payload appended as its only argument.

    Args:
        command: Executable and any fixed leading arguments
        args: Invocation payload
        secrets: Exposed to the action as environment variables
        timeout: Seconds before the action is killed
        cwd: Working directory for the action
        base_env: Environment to start from (default: current environment)

    Raises:
        ValueError: If command is empty
        ActionRunError: If the command is missing or times out
    """
    if not command:
        raise ValueError("command must not be empty")

    env = dict(os.environ if base_env is None else base_env)
    env.update(secrets or {})

    argv = [*command, args.to_wire()]
    logger.debug(f"Running action: {' '.join(command)} (secrets: {sorted(secrets or {})})")

    try:
        completed = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            encoding="utf-8",
            env=env,
            cwd=cwd,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise ActionRunError(f"Action command not found: {command[0]}", cause=e) from e
    except subprocess.TimeoutExpired as e:
        raise ActionRunError(f"Action timed out after {timeout}s", cause=e) from e

    if completed.stderr:
        logger.debug(f"Action stderr: {completed.stderr}")

    output: ActionOutput | None = None
    output_error: str | None = None
    try:
        output = parse_action_output(completed.stdout)
    except ActionRunError as e:
        output_error = str(e)

    return ActionRun(
        exit_code=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
        output=output,
        output_error=output_error,
    )
