"""Event router for the skill.

Handlers are registered with a predicate. The first registered handler
whose predicate matches an event handles it, so registration order is the
priority order. Nothing raised by a predicate or handler reaches the
caller: it is logged and answered with an apology.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from catalog import Catalog
from events import InboundEvent, describe_event
from responses import ResponseDescriptor, speak

log = logging.getLogger(__name__)

APOLOGY = "Sorry, I had trouble doing what you asked. Please try again."

Predicate = Callable[[InboundEvent], bool]
Handler = Callable[[InboundEvent, Catalog], ResponseDescriptor]
ErrorHandler = Callable[[InboundEvent, Optional[BaseException]], ResponseDescriptor]


def apologize(event: InboundEvent, error: Optional[BaseException]) -> ResponseDescriptor:
    return speak(APOLOGY, reprompt=APOLOGY)


@dataclass(frozen=True)
class HandlerEntry:
    name: str
    matches: Predicate
    handle: Handler


class SkillRouter:
    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self.entries: List[HandlerEntry] = []
        self.error_handler: ErrorHandler = apologize

    def register(self, matches: Predicate, handler: Handler, name: Optional[str] = None) -> None:
        """Append a handler; it only sees events no earlier entry matched."""
        self.entries.append(HandlerEntry(name or getattr(handler, "__name__", "handler"), matches, handler))

    def set_error_handler(self, handler: ErrorHandler) -> None:
        self.error_handler = handler

    def match(self, event: InboundEvent) -> Optional[HandlerEntry]:
        for entry in self.entries:
            if entry.matches(event):
                return entry
        return None

    def dispatch(self, event: InboundEvent) -> ResponseDescriptor:
        label = describe_event(event)
        try:
            entry = self.match(event)
            if entry is None:
                log.warning("No handler for %s", label)
                return self.error_handler(event, None)
            log.info("%s -> %s", label, entry.name)
            return entry.handle(event, self.catalog)
        except Exception as exc:
            log.exception("Error handling %s", label)
            try:
                return self.error_handler(event, exc)
            except Exception:
                log.exception("Error handler failed for %s", label)
                return apologize(event, exc)
