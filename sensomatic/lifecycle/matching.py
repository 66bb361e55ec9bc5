"""Find the window in which everyone who said yes is free."""

from collections.abc import Iterable
from uuid import UUID

from sensomatic.models import Availability, MatchResults, Ping, Response, TimeOverlap


def find_overlap(windows: list[Availability]) -> TimeOverlap | None:
    """
    Intersect availability windows.

    The overlap runs from the latest start to the earliest end. A single
    window is its own overlap. Returns None when the windows do not share any
    time, including when they only touch at an edge.
    """
    if not windows:
        return None

    overlap_start = max(w.earliest for w in windows)
    overlap_end = min(w.latest for w in windows)

    if overlap_start >= overlap_end:
        return None

    return TimeOverlap(
        start=overlap_start,
        end=overlap_end,
        attendee_count=len(windows),
    )


def match_responses(ping_id: UUID, responses: Iterable[Response]) -> MatchResults:
    """
    Compute match results for a set of responses.

    Only responses that answered yes and gave availability take part. A yes
    without availability is treated like a no for matching, though it stays
    in the ping's response list. ``attendee_count`` counts the contributing
    responses only; the initiator is not added.
    """
    windows = [r.availability for r in responses if r.answer and r.availability is not None]

    overlap = find_overlap(windows)
    return MatchResults(
        ping_id=ping_id,
        overlap=overlap,
        has_match=overlap is not None,
    )


def calculate_match(ping: Ping) -> MatchResults:
    """Run matching over the ping's current responses."""
    return match_responses(ping.id, ping.responses)


def get_match_results(ping: Ping) -> MatchResults:
    """
    Return the ping's match results.

    Uses the stored results while the ping is in matching. In every other
    state they are recomputed from the stored responses, which cannot change
    after matching, so the recomputed value equals the stored one.
    """
    stored = ping.match_results
    if stored is not None:
        return stored
    return calculate_match(ping)
