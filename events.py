"""Inbound skill events.

The request envelope is deserialized into ``ask_sdk_model`` objects by the
SDK serializer and then narrowed to the few things the router looks at:
the request type, the intent name and slot values, and the AudioPlayer /
PlaybackController sub-type.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from ask_sdk_core.exceptions import SerializationException
from ask_sdk_core.serialize import DefaultSerializer
from ask_sdk_model import IntentRequest, LaunchRequest, Request, RequestEnvelope, SessionEndedRequest
from ask_sdk_model.interfaces.system import ExceptionEncounteredRequest

AUDIO_PLAYER_PREFIX = "AudioPlayer."
PLAYBACK_CONTROLLER_PREFIX = "PlaybackController."

serializer = DefaultSerializer()


class EventParseError(ValueError):
    """The envelope is not something we can read a request out of."""


@dataclass(frozen=True)
class LaunchEvent:
    pass


@dataclass(frozen=True)
class IntentEvent:
    name: str
    slots: Dict[str, Optional[str]] = field(default_factory=dict)

    def slot(self, name: str) -> Optional[str]:
        return self.slots.get(name)


@dataclass(frozen=True)
class AudioPlayerEvent:
    subtype: str
    token: Optional[str] = None
    offset_ms: int = 0
    error: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class PlaybackControllerEvent:
    subtype: str


@dataclass(frozen=True)
class SystemExceptionEvent:
    error: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class SessionEndedEvent:
    reason: Optional[str] = None


@dataclass(frozen=True)
class UnknownEvent:
    request_type: str


InboundEvent = Union[
    LaunchEvent,
    IntentEvent,
    AudioPlayerEvent,
    PlaybackControllerEvent,
    SystemExceptionEvent,
    SessionEndedEvent,
    UnknownEvent,
]


def _plain(obj: Any) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    return serializer.serialize(obj)


def read_envelope(envelope: Any) -> RequestEnvelope:
    """Deserialize a decoded JSON envelope into a ``RequestEnvelope``."""
    if not isinstance(envelope, Mapping):
        raise EventParseError("Envelope must be a JSON object")
    request = envelope.get("request")
    if not isinstance(request, Mapping) or not isinstance(request.get("type"), str):
        raise EventParseError("Envelope has no request type")
    try:
        return serializer.deserialize(json.dumps(envelope), RequestEnvelope)
    except (SerializationException, TypeError, ValueError) as exc:
        raise EventParseError(f"Unreadable {request['type']}: {exc}") from exc


def to_event(request: Request) -> InboundEvent:
    request_type = request.object_type
    if isinstance(request, LaunchRequest):
        return LaunchEvent()
    if isinstance(request, IntentRequest):
        intent = request.intent
        if intent is None or not intent.name:
            raise EventParseError("IntentRequest has no intent name")
        slots = {name: slot.value if slot is not None else None for name, slot in (intent.slots or {}).items()}
        return IntentEvent(name=intent.name, slots=slots)
    if request_type.startswith(AUDIO_PLAYER_PREFIX):
        offset = getattr(request, "offset_in_milliseconds", None)
        return AudioPlayerEvent(
            subtype=request_type[len(AUDIO_PLAYER_PREFIX):],
            token=getattr(request, "token", None),
            offset_ms=offset or 0,
            error=_plain(getattr(request, "error", None)),
        )
    if request_type.startswith(PLAYBACK_CONTROLLER_PREFIX):
        return PlaybackControllerEvent(subtype=request_type[len(PLAYBACK_CONTROLLER_PREFIX):])
    if isinstance(request, ExceptionEncounteredRequest):
        return SystemExceptionEvent(error=_plain(request.error))
    if isinstance(request, SessionEndedRequest):
        return SessionEndedEvent(reason=request.reason.value if request.reason is not None else None)
    return UnknownEvent(request_type=request_type)


def parse_event(envelope: Any) -> InboundEvent:
    """Turn a request envelope (decoded JSON) into an :data:`InboundEvent`.

    Raises :class:`EventParseError` if there is no readable request.
    Request types the SDK model does not know, or that no handler cares
    about, come back as :class:`UnknownEvent`.
    """
    if isinstance(envelope, Mapping):
        request = envelope.get("request")
        if isinstance(request, Mapping) and isinstance(request.get("type"), str):
            if Request.get_real_child_model(request) is None:
                return UnknownEvent(request_type=request["type"])
    return to_event(read_envelope(envelope).request)


def describe_event(event: InboundEvent) -> str:
    """Short label for log lines."""
    if isinstance(event, IntentEvent):
        return f"IntentRequest({event.name})"
    if isinstance(event, AudioPlayerEvent):
        return AUDIO_PLAYER_PREFIX + event.subtype
    if isinstance(event, PlaybackControllerEvent):
        return PLAYBACK_CONTROLLER_PREFIX + event.subtype
    if isinstance(event, UnknownEvent):
        return event.request_type
    return type(event).__name__
