"""Tests for lifecycle guards and transitions."""

from uuid import uuid4

import pytest
from factories import at, make_response

from sensomatic.core.errors import ConflictError, ForbiddenError, NotFoundError
from sensomatic.lifecycle import state_machine
from sensomatic.lifecycle.matching import calculate_match
from sensomatic.models import AttendeeStatus, HangoutData, MatchResults, Ping, PingState, Timeline
from sensomatic.models.ping import (
    ActiveHangout,
    Cancelled,
    Complete,
    Gathering,
    Matching,
    NoMatch,
    PingSent,
    VenueConfirmed,
)

INITIATOR = uuid4()
ATTENDEE = uuid4()
TIMELINE = Timeline(start=at(18), end=at(21))


def build_ping(state: PingState) -> Ping:
    """A ping in the given state with one yes response from ATTENDEE."""
    responses = [make_response(ATTENDEE, window=(17, 22))]
    hangout = HangoutData.create([ATTENDEE], TIMELINE)
    results = MatchResults(ping_id=uuid4(), has_match=True)
    lifecycles = {
        PingState.PING_SENT: PingSent(),
        PingState.GATHERING: Gathering(responses=responses),
        PingState.MATCHING: Matching(responses=responses, match_results=results),
        PingState.NO_MATCH: NoMatch(responses=responses),
        PingState.VENUE_CONFIRMED: VenueConfirmed(responses=responses, hangout=hangout),
        PingState.ACTIVE_HANGOUT: ActiveHangout(responses=responses, hangout=hangout),
        PingState.COMPLETE: Complete(responses=responses, hangout=hangout),
        PingState.CANCELLED: Cancelled(responses=responses),
    }
    return Ping(
        initiator=INITIATOR,
        group=uuid4(),
        activity_type="dinner",
        rough_timing="friday",
        lifecycle=lifecycles[state],
    )


ALL_STATES = list(PingState)
TERMINAL_STATES = [PingState.NO_MATCH, PingState.COMPLETE, PingState.CANCELLED]
OPEN_STATES = [s for s in ALL_STATES if s not in TERMINAL_STATES]


class TestLifecycleShape:
    """Tests that each variant exposes exactly its declared data."""

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_declared_data_only(self, state: PingState):
        ping = build_ping(state)

        has_results = state == PingState.MATCHING
        has_hangout = state in (
            PingState.VENUE_CONFIRMED,
            PingState.ACTIVE_HANGOUT,
            PingState.COMPLETE,
        )
        assert ping.state == state
        assert (ping.match_results is not None) is has_results
        assert (ping.hangout is not None) is has_hangout
        assert len(ping.responses) == (0 if state == PingState.PING_SENT else 1)

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_terminal_states(self, state: PingState):
        assert build_ping(state).is_terminal is (state in TERMINAL_STATES)

    def test_variant_rejects_undeclared_data(self):
        """Test a gathering value cannot carry a hangout."""
        with pytest.raises(ValueError):
            Gathering(responses=[], hangout=HangoutData.create([ATTENDEE], TIMELINE))

    def test_lifecycle_round_trips_through_json(self):
        ping = build_ping(PingState.VENUE_CONFIRMED)

        restored = Ping.model_validate_json(ping.model_dump_json())

        assert isinstance(restored.lifecycle, VenueConfirmed)
        assert restored.hangout == ping.hangout
        assert restored.responses == ping.responses


class TestGuards:
    """Tests for which operations each state allows."""

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_can_add_response(self, state: PingState):
        ping = build_ping(state)
        if state in (PingState.PING_SENT, PingState.GATHERING):
            state_machine.can_add_response(ping)
        else:
            with pytest.raises(ConflictError):
                state_machine.can_add_response(ping)

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_can_trigger_match_initiator(self, state: PingState):
        ping = build_ping(state)
        if state == PingState.GATHERING:
            state_machine.can_trigger_match(ping, INITIATOR)
        else:
            with pytest.raises(ConflictError):
                state_machine.can_trigger_match(ping, INITIATOR)

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_can_trigger_match_non_initiator_always_forbidden(self, state: PingState):
        with pytest.raises(ForbiddenError):
            state_machine.can_trigger_match(build_ping(state), ATTENDEE)

    @pytest.mark.parametrize(
        "guard,allowed",
        [
            (state_machine.can_confirm, PingState.MATCHING),
            (state_machine.can_activate, PingState.VENUE_CONFIRMED),
            (state_machine.can_complete, PingState.ACTIVE_HANGOUT),
        ],
    )
    @pytest.mark.parametrize("state", ALL_STATES)
    def test_single_state_guards(self, guard, allowed: PingState, state: PingState):
        ping = build_ping(state)
        if state == allowed:
            guard(ping)
        else:
            with pytest.raises(ConflictError):
                guard(ping)

    @pytest.mark.parametrize("state", OPEN_STATES)
    def test_can_cancel_open_states(self, state: PingState):
        state_machine.can_cancel(build_ping(state), INITIATOR)

    @pytest.mark.parametrize("state", TERMINAL_STATES)
    def test_cannot_cancel_terminal_states(self, state: PingState):
        with pytest.raises(ConflictError):
            state_machine.can_cancel(build_ping(state), INITIATOR)

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_non_initiator_cancel_forbidden(self, state: PingState):
        with pytest.raises(ForbiddenError):
            state_machine.can_cancel(build_ping(state), ATTENDEE)

    def test_guards_do_not_mutate(self):
        ping = build_ping(PingState.GATHERING)
        before = ping.model_copy(deep=True)

        state_machine.can_trigger_match(ping, INITIATOR)
        with pytest.raises(ConflictError):
            state_machine.can_confirm(ping)

        assert ping == before


class TestTransitions:
    """Tests for moving between states."""

    def test_match_moves_to_matching(self):
        ping = build_ping(PingState.GATHERING)
        responses = list(ping.responses)
        results = calculate_match(ping)

        state_machine.transition_to_matching(ping, results)

        assert ping.state == PingState.MATCHING
        assert ping.match_results == results
        assert ping.responses == responses

    def test_no_overlap_moves_to_no_match(self):
        ping = build_ping(PingState.GATHERING)
        responses = list(ping.responses)

        state_machine.transition_to_matching(
            ping, MatchResults(ping_id=ping.id, has_match=False)
        )

        assert ping.state == PingState.NO_MATCH
        assert ping.match_results is None
        assert ping.responses == responses
        assert ping.is_terminal

    def test_no_match_cannot_retry(self):
        ping = build_ping(PingState.NO_MATCH)
        with pytest.raises(ConflictError):
            state_machine.can_trigger_match(ping, INITIATOR)

    def test_confirm_creates_hangout_from_positive_responses(self):
        ping = build_ping(PingState.GATHERING)
        declined = uuid4()
        no_window = uuid4()
        ping.add_response(make_response(declined, answer=False))
        ping.add_response(make_response(no_window, answer=True))
        state_machine.transition_to_matching(ping, calculate_match(ping))

        hangout = state_machine.create_hangout_data(ping, TIMELINE)
        state_machine.transition_to_venue_confirmed(ping, hangout)

        assert ping.state == PingState.VENUE_CONFIRMED
        assert ping.hangout.confirmed_attendees == [ATTENDEE, no_window]
        assert ping.hangout.timeline == TIMELINE
        assert ping.hangout.attendee_statuses == {
            ATTENDEE: AttendeeStatus.PENDING,
            no_window: AttendeeStatus.PENDING,
        }
        assert len(ping.responses) == 3

    def test_activate_and_complete_carry_hangout(self):
        ping = build_ping(PingState.VENUE_CONFIRMED)
        hangout = ping.hangout

        state_machine.transition_to_active(ping)
        assert ping.state == PingState.ACTIVE_HANGOUT
        assert ping.hangout == hangout

        state_machine.transition_to_complete(ping)
        assert ping.state == PingState.COMPLETE
        assert ping.hangout == hangout
        assert ping.is_terminal

    @pytest.mark.parametrize("state", OPEN_STATES)
    def test_cancel_keeps_only_responses(self, state: PingState):
        ping = build_ping(state)
        responses = list(ping.responses)

        state_machine.transition_to_cancelled(ping)

        assert ping.state == PingState.CANCELLED
        assert ping.responses == responses
        assert ping.hangout is None
        assert ping.match_results is None

    @pytest.mark.parametrize(
        "transition,allowed",
        [
            (state_machine.transition_to_active, PingState.VENUE_CONFIRMED),
            (state_machine.transition_to_complete, PingState.ACTIVE_HANGOUT),
            (state_machine.transition_to_cancelled, None),
        ],
    )
    @pytest.mark.parametrize("state", TERMINAL_STATES + [PingState.GATHERING])
    def test_wrong_state_leaves_ping_untouched(self, transition, allowed, state):
        ping = build_ping(state)
        if state == allowed or (allowed is None and state not in TERMINAL_STATES):
            pytest.skip("transition is legal from this state")
        before = ping.model_copy(deep=True)

        with pytest.raises(ConflictError):
            transition(ping)

        assert ping == before

    def test_match_outside_gathering_rejected(self):
        ping = build_ping(PingState.MATCHING)
        with pytest.raises(ConflictError):
            state_machine.transition_to_matching(
                ping, MatchResults(ping_id=ping.id, has_match=True)
            )
        assert ping.state == PingState.MATCHING

    def test_full_happy_path(self):
        """Test a ping from sent to complete."""
        ping = Ping(
            initiator=INITIATOR,
            group=uuid4(),
            activity_type="drinks",
            rough_timing="tonight",
        )
        assert ping.state == PingState.PING_SENT

        ping.add_response(make_response(ATTENDEE, window=(17, 21)))
        ping.add_response(make_response(window=(18, 22)))
        assert ping.state == PingState.GATHERING

        state_machine.can_trigger_match(ping, INITIATOR)
        state_machine.transition_to_matching(ping, calculate_match(ping))
        assert ping.match_results.overlap.start == at(18)

        state_machine.can_confirm(ping)
        state_machine.transition_to_venue_confirmed(
            ping, state_machine.create_hangout_data(ping, TIMELINE)
        )
        state_machine.can_activate(ping)
        state_machine.transition_to_active(ping)
        state_machine.can_complete(ping)
        state_machine.transition_to_complete(ping)

        assert ping.state == PingState.COMPLETE
        assert len(ping.responses) == 2


class TestAddResponse:
    """Tests for recording responses on a ping."""

    def test_first_response_starts_gathering(self):
        ping = build_ping(PingState.PING_SENT)
        response = make_response(ATTENDEE)

        ping.add_response(response)

        assert ping.state == PingState.GATHERING
        assert ping.responses == [response]
        assert ping.has_user_responded(ATTENDEE)
        assert ping.find_response(response.id) == response
        assert ping.find_response_by_user(ATTENDEE) == response
        assert ping.find_response_by_user(INITIATOR) is None

    @pytest.mark.parametrize("state", [s for s in ALL_STATES if s not in (PingState.PING_SENT, PingState.GATHERING)])
    def test_closed_states_reject_responses(self, state: PingState):
        ping = build_ping(state)
        with pytest.raises(ConflictError):
            ping.add_response(make_response())
        assert len(ping.responses) == 1


class TestAttendeeStatus:
    """Tests for attendee status updates."""

    def test_attendee_updates_own_status(self):
        ping = build_ping(PingState.ACTIVE_HANGOUT)

        state_machine.update_attendee_status(ping, ATTENDEE, ATTENDEE, AttendeeStatus.ENROUTE)

        assert ping.hangout.attendee_statuses[ATTENDEE] == AttendeeStatus.ENROUTE

    def test_cannot_update_someone_else(self):
        ping = build_ping(PingState.ACTIVE_HANGOUT)
        with pytest.raises(ForbiddenError):
            state_machine.update_attendee_status(ping, INITIATOR, ATTENDEE, AttendeeStatus.ARRIVED)

    def test_unknown_attendee(self):
        ping = build_ping(PingState.VENUE_CONFIRMED)
        stranger = uuid4()
        with pytest.raises(NotFoundError):
            state_machine.update_attendee_status(ping, stranger, stranger, AttendeeStatus.ARRIVED)

    def test_no_hangout(self):
        ping = build_ping(PingState.GATHERING)
        with pytest.raises(ConflictError):
            state_machine.update_attendee_status(ping, ATTENDEE, ATTENDEE, AttendeeStatus.ARRIVED)
