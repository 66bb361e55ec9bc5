"""Advance confirmed hangouts as their timeline passes."""

import logging
from datetime import UTC, datetime

from sensomatic.core.errors import ConflictError
from sensomatic.core.store import AppState
from sensomatic.lifecycle import state_machine
from sensomatic.models import Ping, PingState

logger = logging.getLogger(__name__)


def _activate(ping: Ping) -> None:
    state_machine.can_activate(ping)
    state_machine.transition_to_active(ping)


def _complete(ping: Ping) -> None:
    state_machine.can_complete(ping)
    state_machine.transition_to_complete(ping)


def advance_due_hangouts(state: AppState, now: datetime | None = None) -> dict:
    """
    Move hangouts along once their timeline has started or ended.

    Confirmed pings whose timeline has started become active; active pings
    whose timeline has ended become complete. A ping confirmed with a window
    that has already ended is activated on one sweep and completed on the
    next. Each ping is updated on its own through the store, with the guard
    checked again under the lock, so a ping that was moved or cancelled by a
    request in the meantime is skipped.

    Returns dict with sweep statistics.
    """
    now = now or datetime.now(UTC)
    stats = {"activated": 0, "completed": 0, "skipped": 0}

    due_to_start = state.pings.filter(
        lambda p: p.state == PingState.VENUE_CONFIRMED and p.hangout.timeline.start <= now
    )
    due_to_end = state.pings.filter(
        lambda p: p.state == PingState.ACTIVE_HANGOUT and p.hangout.timeline.end <= now
    )

    for ping in due_to_start:
        try:
            if state.pings.update(ping.id, _activate) is not None:
                stats["activated"] += 1
        except ConflictError:
            logger.debug(f"Ping {ping.id} changed state before activation, skipping")
            stats["skipped"] += 1

    for ping in due_to_end:
        try:
            if state.pings.update(ping.id, _complete) is not None:
                stats["completed"] += 1
        except ConflictError:
            logger.debug(f"Ping {ping.id} changed state before completion, skipping")
            stats["skipped"] += 1

    return stats
