"""Domain models for the workflow action SDK."""

from .args import Args, Baggage, Event, EventWrapper
from .output import ErrorOutput


__all__ = [
    "Args",
    "Baggage",
    "Event",
    "EventWrapper",
    "ErrorOutput",
]
