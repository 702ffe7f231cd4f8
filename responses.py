"""Skill responses: what to say and what to play.

A handler returns a :class:`ResponseDescriptor`; :func:`render_envelope`
turns it into the platform response JSON through the ASK SDK response
factory and serializer. Speech is sent as SSML.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from xml.sax.saxutils import escape

from ask_sdk_core.response_helper import ResponseFactory
from ask_sdk_core.serialize import DefaultSerializer
from ask_sdk_model import Response, ResponseEnvelope
from ask_sdk_model.interfaces import audioplayer

REPLACE_ALL = "REPLACE_ALL"

serializer = DefaultSerializer()


@dataclass(frozen=True)
class PlayDirective:
    url: str
    token: str
    behavior: str = REPLACE_ALL
    offset_ms: int = 0


@dataclass(frozen=True)
class StopDirective:
    pass


Directive = Union[PlayDirective, StopDirective]


@dataclass(frozen=True)
class ResponseDescriptor:
    speech_text: Optional[str] = None
    reprompt_text: Optional[str] = None
    directive: Optional[Directive] = None

    @property
    def should_end_session(self) -> bool:
        # A reprompt means we expect an answer
        return self.reprompt_text is None


def empty() -> ResponseDescriptor:
    return ResponseDescriptor()


def speak(text: str, reprompt: Optional[str] = None) -> ResponseDescriptor:
    return ResponseDescriptor(speech_text=text, reprompt_text=reprompt)


def play(url: str, token: str, speech: Optional[str] = None) -> ResponseDescriptor:
    return ResponseDescriptor(speech_text=speech, directive=PlayDirective(url=url, token=token))


def stop() -> ResponseDescriptor:
    return ResponseDescriptor(directive=StopDirective())


def _sdk_directive(directive: Directive):
    if isinstance(directive, StopDirective):
        return audioplayer.StopDirective()
    return audioplayer.PlayDirective(
        play_behavior=audioplayer.PlayBehavior(directive.behavior),
        audio_item=audioplayer.AudioItem(
            stream=audioplayer.Stream(
                token=directive.token,
                url=directive.url,
                offset_in_milliseconds=directive.offset_ms,
            )
        ),
    )


def build_response(descriptor: ResponseDescriptor) -> Response:
    """Build the SDK ``Response`` for ``descriptor``."""
    factory = ResponseFactory()
    if descriptor.speech_text is not None:
        factory.speak(escape(descriptor.speech_text))
    if descriptor.reprompt_text is not None:
        factory.ask(escape(descriptor.reprompt_text))
    if descriptor.directive is not None:
        factory.add_directive(_sdk_directive(descriptor.directive))
    factory.set_should_end_session(descriptor.should_end_session)
    return factory.response


def render_envelope(descriptor: ResponseDescriptor) -> Dict[str, Any]:
    envelope = ResponseEnvelope(version="1.0", response=build_response(descriptor))
    return serializer.serialize(envelope)
