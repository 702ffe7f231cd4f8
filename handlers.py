"""Request handlers for the Home Stream skill.

Each handler is a ``(predicate, handle)`` pair; :func:`build_router`
registers them in priority order.
"""

import logging
from typing import Callable, Optional

from catalog import Catalog, ContentItem
from events import (
    AudioPlayerEvent,
    InboundEvent,
    IntentEvent,
    LaunchEvent,
    PlaybackControllerEvent,
    SessionEndedEvent,
    SystemExceptionEvent,
)
from responses import ResponseDescriptor, empty, play, speak, stop
from router import SkillRouter

log = logging.getLogger(__name__)

CONTENT_SLOT = "contentType"

PLAY_DEFAULT_INTENT = "PlayDefaultIntent"
PLAY_CONTENT_INTENT = "PlayContentIntent"
STOP_INTENTS = ("AMAZON.PauseIntent", "AMAZON.StopIntent", "AMAZON.CancelIntent")
RESUME_INTENT = "AMAZON.ResumeIntent"
HELP_INTENT = "AMAZON.HelpIntent"
FALLBACK_INTENT = "AMAZON.FallbackIntent"
UNSUPPORTED_INTENTS = (
    "AMAZON.NextIntent",
    "AMAZON.PreviousIntent",
    "AMAZON.ShuffleOnIntent",
    "AMAZON.ShuffleOffIntent",
    "AMAZON.LoopOnIntent",
    "AMAZON.LoopOffIntent",
    "AMAZON.RepeatIntent",
    "AMAZON.StartOverIntent",
)

NOT_CONFIGURED = "No content is configured."
UNSUPPORTED = "Sorry, I don't support that feature yet."
NOT_UNDERSTOOD = "Sorry, I didn't understand that. Say play to start streaming."
TRY_CONTENT_NAME = "Try saying play, followed by the content name."


def is_intent(*names: str) -> Callable[[InboundEvent], bool]:
    def matches(event: InboundEvent) -> bool:
        return isinstance(event, IntentEvent) and event.name in names
    return matches


def is_type(event_type: type) -> Callable[[InboundEvent], bool]:
    def matches(event: InboundEvent) -> bool:
        return isinstance(event, event_type)
    return matches


def _suggestion(catalog: Catalog) -> str:
    default_key = catalog.default_key
    if default_key is None:
        return TRY_CONTENT_NAME
    return f"Try saying play {default_key}."


def _play_item(item: ContentItem, speech: Optional[str] = None) -> ResponseDescriptor:
    return play(item.url, item.key, speech=speech)


def _play_default(catalog: Catalog, not_configured: str) -> ResponseDescriptor:
    content = catalog.get_default()
    if content is None:
        return speak(not_configured)
    return _play_item(content, f"Playing {content.title}.")


# ---------------------------------------------------------------------------
# Launch and play
# ---------------------------------------------------------------------------
def handle_launch(event: InboundEvent, catalog: Catalog) -> ResponseDescriptor:
    if catalog.is_empty():
        return speak(
            "Welcome to Home Stream. No content is configured yet. "
            "Please set up stream URLs in the skill configuration."
        )
    return speak(
        f"Welcome to Home Stream. You can play {catalog.describe_for_speech()}. "
        "What would you like to hear?",
        reprompt=_suggestion(catalog),
    )


def handle_play_default(event: InboundEvent, catalog: Catalog) -> ResponseDescriptor:
    return _play_default(catalog, "No content is configured. Please set up stream URLs.")


def handle_play_content(event: IntentEvent, catalog: Catalog) -> ResponseDescriptor:
    requested = (event.slot(CONTENT_SLOT) or "").strip().lower()
    if not requested:
        return _play_default(catalog, NOT_CONFIGURED)

    content = catalog.resolve(requested)
    if content is not None:
        return _play_item(content, f"Playing {content.title}.")

    log.info("No content for %r", requested)
    return speak(
        f"I don't have {requested}. You can play {catalog.describe_for_speech()}. "
        "What would you like?",
        reprompt=TRY_CONTENT_NAME,
    )


# ---------------------------------------------------------------------------
# Playback control
# ---------------------------------------------------------------------------
def handle_stop(event: InboundEvent, catalog: Catalog) -> ResponseDescriptor:
    return stop()


def handle_resume(event: InboundEvent, catalog: Catalog) -> ResponseDescriptor:
    # Offsets are not stored, so resume restarts the default stream
    content = catalog.get_default()
    if content is None:
        return speak(NOT_CONFIGURED)
    return _play_item(content)


def handle_audio_player(event: AudioPlayerEvent, catalog: Catalog) -> ResponseDescriptor:
    if event.subtype == "PlaybackFailed":
        log.warning("Playback failed for token %r: %s", event.token, event.error)
    else:
        log.info("AudioPlayer event: %s token=%r offset=%d", event.subtype, event.token, event.offset_ms)
    return empty()


def handle_playback_controller(event: PlaybackControllerEvent, catalog: Catalog) -> ResponseDescriptor:
    log.info("PlaybackController event: %s", event.subtype)
    if event.subtype == "PlayCommandIssued":
        content = catalog.get_default()
        if content is None:
            return empty()
        return _play_item(content)
    if event.subtype == "PauseCommandIssued":
        return stop()
    # Next/Previous: nothing to skip to
    return empty()


# ---------------------------------------------------------------------------
# System and standard intents
# ---------------------------------------------------------------------------
def handle_system_exception(event: SystemExceptionEvent, catalog: Catalog) -> ResponseDescriptor:
    log.warning("System exception: %s", event.error)
    return empty()


def handle_help(event: InboundEvent, catalog: Catalog) -> ResponseDescriptor:
    return speak(
        "You can say play followed by a content type. "
        f"Available options are: {catalog.describe_for_speech()}. "
        "You can also say pause to stop, or resume to continue. "
        "While playing, you can say Alexa, set a sleep timer, to automatically stop playback. "
        "What would you like to play?",
        reprompt=_suggestion(catalog),
    )


def handle_unsupported(event: InboundEvent, catalog: Catalog) -> ResponseDescriptor:
    return speak(UNSUPPORTED)


def handle_fallback(event: InboundEvent, catalog: Catalog) -> ResponseDescriptor:
    return speak(NOT_UNDERSTOOD, reprompt=NOT_UNDERSTOOD)


def handle_session_ended(event: SessionEndedEvent, catalog: Catalog) -> ResponseDescriptor:
    log.info("Session ended: %s", event.reason)
    return empty()


HANDLERS = (
    (is_type(LaunchEvent), handle_launch),
    (is_intent(PLAY_DEFAULT_INTENT), handle_play_default),
    (is_intent(PLAY_CONTENT_INTENT), handle_play_content),
    (is_intent(*STOP_INTENTS), handle_stop),
    (is_intent(RESUME_INTENT), handle_resume),
    (is_type(AudioPlayerEvent), handle_audio_player),
    (is_type(PlaybackControllerEvent), handle_playback_controller),
    (is_type(SystemExceptionEvent), handle_system_exception),
    (is_intent(HELP_INTENT), handle_help),
    (is_intent(*UNSUPPORTED_INTENTS), handle_unsupported),
    (is_intent(FALLBACK_INTENT), handle_fallback),
    (is_type(SessionEndedEvent), handle_session_ended),
)


def build_router(catalog: Catalog) -> SkillRouter:
    router = SkillRouter(catalog)
    for matches, handler in HANDLERS:
        router.register(matches, handler)
    return router
