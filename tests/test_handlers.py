"""Tests for the skill handlers wired through build_router."""

import pytest

from catalog import ContentCatalog
from events import (
    AudioPlayerEvent,
    IntentEvent,
    LaunchEvent,
    PlaybackControllerEvent,
    SessionEndedEvent,
    SystemExceptionEvent,
    UnknownEvent,
)
from handlers import STOP_INTENTS, UNSUPPORTED_INTENTS, build_router
from responses import PlayDirective, ResponseDescriptor, StopDirective
from router import APOLOGY


def _dispatch(catalog, event):
    return build_router(catalog).dispatch(event)


def _is_empty(response):
    return response == ResponseDescriptor()


def test_launch_lists_content_and_suggests_default(catalog):
    response = _dispatch(catalog, LaunchEvent())
    assert response.speech_text == (
        "Welcome to Home Stream. You can play ocean sounds, air play, or jazz. "
        "What would you like to hear?"
    )
    assert response.reprompt_text == "Try saying play ocean sounds."
    assert response.directive is None


def test_launch_with_empty_catalog_has_no_reprompt(empty_catalog):
    response = _dispatch(empty_catalog, LaunchEvent())
    assert "No content is configured yet" in response.speech_text
    assert response.reprompt_text is None
    assert response.directive is None
    assert response.should_end_session


def test_play_default_intent(catalog):
    response = _dispatch(catalog, IntentEvent("PlayDefaultIntent"))
    assert response.speech_text == "Playing Ocean Sounds."
    assert response.directive == PlayDirective(
        url="https://example.com/ocean.mp3", token="ocean sounds", behavior="REPLACE_ALL", offset_ms=0
    )


def test_play_default_intent_without_content(empty_catalog):
    response = _dispatch(empty_catalog, IntentEvent("PlayDefaultIntent"))
    assert response.speech_text == "No content is configured. Please set up stream URLs."
    assert response.directive is None


@pytest.mark.parametrize("value", ["jazz", "  Jazz ", "JAZZ"])
def test_play_content_found(catalog, value):
    response = _dispatch(catalog, IntentEvent("PlayContentIntent", {"contentType": value}))
    assert response.speech_text == "Playing Jazz Radio."
    assert response.directive == PlayDirective(url="https://example.com/jazz.mp3", token="jazz")


def test_play_content_unknown_lists_options(catalog):
    response = _dispatch(catalog, IntentEvent("PlayContentIntent", {"contentType": "Heavy Metal"}))
    assert response.directive is None
    assert response.speech_text == (
        "I don't have heavy metal. You can play ocean sounds, air play, or jazz. What would you like?"
    )
    assert response.reprompt_text == "Try saying play, followed by the content name."


def test_play_content_unknown_with_empty_catalog(empty_catalog):
    response = _dispatch(empty_catalog, IntentEvent("PlayContentIntent", {"contentType": "jazz"}))
    assert "nothing configured" in response.speech_text
    assert response.directive is None


@pytest.mark.parametrize("slots", [{}, {"contentType": None}, {"contentType": "   "}])
def test_play_content_without_slot_plays_default(catalog, slots):
    response = _dispatch(catalog, IntentEvent("PlayContentIntent", slots))
    assert response.speech_text == "Playing Ocean Sounds."
    assert response.directive.token == "ocean sounds"


def test_play_content_without_slot_or_content(empty_catalog):
    response = _dispatch(empty_catalog, IntentEvent("PlayContentIntent"))
    assert response.speech_text == "No content is configured."
    assert response.directive is None


@pytest.mark.parametrize("intent", STOP_INTENTS)
def test_stop_intents_emit_stop_without_speech(catalog, intent):
    response = _dispatch(catalog, IntentEvent(intent))
    assert response.directive == StopDirective()
    assert response.speech_text is None
    assert response.reprompt_text is None


def test_resume_restarts_default_from_zero(catalog):
    response = _dispatch(catalog, IntentEvent("AMAZON.ResumeIntent"))
    assert response.speech_text is None
    assert response.directive == PlayDirective(url="https://example.com/ocean.mp3", token="ocean sounds")
    assert response.directive.offset_ms == 0


def test_resume_without_content(empty_catalog):
    response = _dispatch(empty_catalog, IntentEvent("AMAZON.ResumeIntent"))
    assert response.speech_text == "No content is configured."


@pytest.mark.parametrize("subtype", [
    "PlaybackStarted", "PlaybackFinished", "PlaybackStopped", "PlaybackNearlyFinished", "PlaybackFailed",
])
def test_audio_player_events_are_acknowledged(catalog, subtype):
    event = AudioPlayerEvent(subtype, token="jazz", offset_ms=1200, error={"type": "MEDIA_ERROR_UNKNOWN"})
    assert _is_empty(_dispatch(catalog, event))


def test_controller_play_command(catalog, empty_catalog):
    response = _dispatch(catalog, PlaybackControllerEvent("PlayCommandIssued"))
    assert response.directive == PlayDirective(url="https://example.com/ocean.mp3", token="ocean sounds")
    assert response.speech_text is None
    assert _is_empty(_dispatch(empty_catalog, PlaybackControllerEvent("PlayCommandIssued")))


def test_controller_pause_command(catalog):
    assert _dispatch(catalog, PlaybackControllerEvent("PauseCommandIssued")).directive == StopDirective()


@pytest.mark.parametrize("subtype", ["NextCommandIssued", "PreviousCommandIssued"])
def test_controller_next_previous_are_noops(catalog, subtype):
    assert _is_empty(_dispatch(catalog, PlaybackControllerEvent(subtype)))


def test_system_exception_and_session_end_are_acknowledged(catalog):
    assert _is_empty(_dispatch(catalog, SystemExceptionEvent({"type": "INVALID_RESPONSE"})))
    assert _is_empty(_dispatch(catalog, SessionEndedEvent("USER_INITIATED")))


def test_help_lists_content(catalog):
    response = _dispatch(catalog, IntentEvent("AMAZON.HelpIntent"))
    assert "Available options are: ocean sounds, air play, or jazz." in response.speech_text
    assert response.reprompt_text == "Try saying play ocean sounds."


def test_help_with_empty_catalog(empty_catalog):
    response = _dispatch(empty_catalog, IntentEvent("AMAZON.HelpIntent"))
    assert "Available options are: nothing configured." in response.speech_text
    assert response.reprompt_text == "Try saying play, followed by the content name."


@pytest.mark.parametrize("intent", UNSUPPORTED_INTENTS)
def test_unsupported_intents(catalog, intent):
    response = _dispatch(catalog, IntentEvent(intent))
    assert response.speech_text == "Sorry, I don't support that feature yet."
    assert response.reprompt_text is None
    assert response.directive is None


def test_fallback_intent(catalog):
    response = _dispatch(catalog, IntentEvent("AMAZON.FallbackIntent"))
    assert response.speech_text == "Sorry, I didn't understand that. Say play to start streaming."
    assert response.reprompt_text == response.speech_text


@pytest.mark.parametrize("event", [IntentEvent("SomethingElseIntent"), UnknownEvent("Dialog.Delegate")])
def test_unrecognized_events_get_apology(catalog, event):
    response = _dispatch(catalog, event)
    assert response.speech_text == APOLOGY
    assert response.directive is None


class BrokenCatalog:
    default_key = "ocean sounds"

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise RuntimeError("catalog unavailable")
        return fail


@pytest.mark.parametrize("event", [
    LaunchEvent(),
    IntentEvent("PlayDefaultIntent"),
    IntentEvent("PlayContentIntent", {"contentType": "jazz"}),
    IntentEvent("AMAZON.HelpIntent"),
    PlaybackControllerEvent("PlayCommandIssued"),
])
def test_catalog_fault_becomes_apology(event):
    response = _dispatch(BrokenCatalog(), event)
    assert response.speech_text == APOLOGY
    assert response.reprompt_text == APOLOGY
    assert response.directive is None


def test_registration_order_is_priority(catalog):
    router = build_router(catalog)
    names = [entry.name for entry in router.entries]
    assert names[:3] == ["handle_launch", "handle_play_default", "handle_play_content"]
    assert names[-1] == "handle_session_ended"
