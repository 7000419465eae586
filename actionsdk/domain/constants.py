from enum import IntEnum
from pathlib import Path

# Wire protocol
ERROR_KEY = "error"
EMPTY_RESULT = "{}"
PAYLOAD_ARG_INDEX = 1
CURRENT_ARGS_VERSION = 1

# Runtime environment variables
LOG_LEVEL_ENV = "ACTIONSDK_LOG_LEVEL"
ALLOW_MULTIPLE_WRITES_ENV = "ACTIONSDK_ALLOW_MULTIPLE_WRITES"

# Harness configuration
CONFIG_DIRNAME = ".actionsdk"
CONFIG_FILENAME = "config.yml"
DEFAULT_CONFIG_PATH = Path(CONFIG_DIRNAME) / CONFIG_FILENAME


class ExitCode(IntEnum):
    """Process exit codes understood by the orchestrator.

    The SDK never exits on the action's behalf (except when the error
    channel itself fails). Actions pick one of these explicitly.
    """

    SUCCESS = 0  # Workflow continues, even after write_error()
    FAILURE = 1  # Workflow branch halts
