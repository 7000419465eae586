"""Domain-level exceptions for the workflow action SDK."""


class ActionSDKError(Exception):
    """Base class for every error raised by the SDK."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class MissingArgumentsError(ActionSDKError):
    """Raised when the process was started without the payload argument."""

    pass


class MalformedPayloadError(ActionSDKError):
    """Raised when the payload argument is not valid JSON or has the wrong shape."""

    pass


class MetadataShapeMismatchError(ActionSDKError):
    """Raised when the metadata blob cannot be decoded into the requested type."""

    pass


class SecretNotFoundError(ActionSDKError):
    """Raised when a secret is unset or set to the empty string."""

    def __init__(self, name: str) -> None:
        super().__init__(f"secret not found: {name}")
        self.name = name


class ResultEncodingError(ActionSDKError):
    """Raised when an action result cannot be serialized to JSON."""

    pass


class ResultWriteError(ActionSDKError):
    """Raised when the output stream rejects a write."""

    pass


class OutputAlreadyWrittenError(ResultWriteError):
    """Raised on a second write when single-write output is enforced."""

    pass
