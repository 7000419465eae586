"""Action metadata access.

Metadata is the per-workflow configuration of an action. Its schema is owned
by the action, so the SDK keeps it as a plain JSON value and only decodes it
once the caller names the type it expects.
"""

from typing import Any, TypeVar

from pydantic import JsonValue, TypeAdapter, ValidationError
from pydantic_core import to_json

from actionsdk.application.args_loader import ArgsLoader, default_loader
from actionsdk.domain.errors import MetadataShapeMismatchError

T = TypeVar("T")


def get_metadata(dest: type[T] | None = None, *, loader: ArgsLoader | None = None) -> Any:
    """Return the action metadata, decoded into ``dest`` when given.

    Args:
        dest: Target type (pydantic model, dataclass, TypedDict, builtin
            container...). ``None`` returns the raw JSON value.
        loader: Payload loader to read from. Defaults to the process-wide one.

    Raises:
        MissingArgumentsError: If no payload argument was passed
        MalformedPayloadError: If the payload could not be decoded
        MetadataShapeMismatchError: If the metadata does not fit ``dest``
    """
    args = (loader if loader is not None else default_loader()).load()
    if dest is None:
        return args.metadata
    return decode_metadata(args.metadata, dest)


def decode_metadata(metadata: JsonValue, dest: type[T]) -> T:
    """Validate a metadata value against ``dest`` without type coercion."""
    raw = to_json(metadata)
    try:
        return TypeAdapter(dest).validate_json(raw, strict=True)
    except ValidationError as e:
        name = getattr(dest, "__name__", repr(dest))
        raise MetadataShapeMismatchError(
            f"metadata does not match {name}: {e}", cause=e
        ) from e
