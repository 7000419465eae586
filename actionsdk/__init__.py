"""SDK for writing workflow actions.

An action is a short-lived process started by the workflow engine with a
single JSON argument. Typical use::

    import sys
    import actionsdk

    def main() -> int:
        try:
            config = actionsdk.get_metadata(Config)
            token = actionsdk.get_secret("SLACK_TOKEN")
        except actionsdk.ActionSDKError as e:
            actionsdk.write_error(e)
            return actionsdk.ExitCode.FAILURE
        actionsdk.write_result({"sent": True})
        return actionsdk.ExitCode.SUCCESS

    sys.exit(main())
"""

from actionsdk.application.args_loader import ArgsLoader, get_args
from actionsdk.application.metadata import get_metadata
from actionsdk.application.output_writer import OutputWriter, write_error, write_result
from actionsdk.application.secrets import get_secret
from actionsdk.domain.constants import ExitCode
from actionsdk.domain.errors import (
    ActionSDKError,
    MalformedPayloadError,
    MetadataShapeMismatchError,
    MissingArgumentsError,
    OutputAlreadyWrittenError,
    ResultEncodingError,
    ResultWriteError,
    SecretNotFoundError,
)
from actionsdk.domain.models import Args, Baggage, Event, EventWrapper

__all__ = [
    "ArgsLoader",
    "get_args",
    "get_metadata",
    "get_secret",
    "OutputWriter",
    "write_result",
    "write_error",
    "ExitCode",
    "Args",
    "Baggage",
    "Event",
    "EventWrapper",
    "ActionSDKError",
    "MissingArgumentsError",
    "MalformedPayloadError",
    "MetadataShapeMismatchError",
    "SecretNotFoundError",
    "ResultEncodingError",
    "ResultWriteError",
    "OutputAlreadyWrittenError",
]
