"""Invocation payload models.

The orchestrator passes a single JSON document as the first process
argument. Wire keys keep the orchestrator's spelling (``ArgsVersion``,
``WorkspaceEvent``, ``ts`` ...) and are mapped onto snake_case fields via
aliases. Unknown keys are ignored so older SDKs keep working against newer
orchestrators.
"""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    NonNegativeInt,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)


_WIRE_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore", allow_inf_nan=False)

# Event fields dropped from the wire form when they hold their zero value.
_OMIT_WHEN_EMPTY = ("user", "id", "timestamp", "version")


def _null_as_empty(v: Any) -> Any:
    # Nil maps and structs arrive as JSON null.
    return {} if v is None else v


class Event(BaseModel):
    """The event that triggered the workflow."""

    model_config = _WIRE_CONFIG

    name: str = ""
    data: dict[str, JsonValue] = Field(default_factory=dict)
    user: dict[str, JsonValue] | None = None
    id: str = ""
    timestamp: int = Field(default=0, alias="ts")
    version: str = Field(default="", alias="v")

    @field_validator("data", mode="before")
    @classmethod
    def _data_null_as_empty(cls, v: Any) -> Any:
        return _null_as_empty(v)

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for field_name in _OMIT_WHEN_EMPTY:
            if getattr(self, field_name):
                continue
            alias = type(self).model_fields[field_name].alias
            data.pop(field_name, None)
            if alias:
                data.pop(alias, None)
        return data


class EventWrapper(BaseModel):
    model_config = _WIRE_CONFIG

    event: Event = Field(default_factory=Event, alias="Event")

    @field_validator("event", mode="before")
    @classmethod
    def _event_null_as_empty(cls, v: Any) -> Any:
        return _null_as_empty(v)


class Baggage(BaseModel):
    """Workflow context carried into the action.

    ``actions`` holds the outputs of the actions that already ran in this
    workflow, keyed by their step number.
    """

    model_config = _WIRE_CONFIG

    event_wrapper: EventWrapper = Field(default_factory=EventWrapper, alias="WorkspaceEvent")
    actions: dict[NonNegativeInt, dict[str, JsonValue]] = Field(
        default_factory=dict, alias="Actions"
    )

    @field_validator("event_wrapper", "actions", mode="before")
    @classmethod
    def _containers_null_as_empty(cls, v: Any) -> Any:
        return _null_as_empty(v)

    def action_output(self, step: int) -> dict[str, JsonValue] | None:
        """Return the output recorded for a previous step, if any."""
        return self.actions.get(step)


class Args(BaseModel):
    """Decoded invocation payload.

    ``metadata`` is left as a generic JSON value; its schema belongs to the
    action being run and is decoded on demand by ``get_metadata``.
    """

    model_config = _WIRE_CONFIG

    args_version: int = Field(default=0, alias="ArgsVersion")
    metadata: JsonValue = Field(default=None, alias="Metadata")
    baggage: Baggage = Field(default_factory=Baggage, alias="Baggage")

    @field_validator("baggage", mode="before")
    @classmethod
    def _baggage_null_as_empty(cls, v: Any) -> Any:
        return _null_as_empty(v)

    @property
    def event(self) -> Event:
        """Shortcut to the triggering event."""
        return self.baggage.event_wrapper.event

    def to_wire(self) -> str:
        """Serialize using the orchestrator's key names."""
        return self.model_dump_json(by_alias=True)
