"""
Tests for the scheduled -> completed result transition.
"""
from datetime import datetime

import pytest
from sqlmodel import Session

from league_engine.models.match import STATUS_COMPLETED, STATUS_SCHEDULED, Match
from league_engine.services.advancement_service import get_bracket_match
from league_engine.services.result_recorder import (
    MatchNotFoundError,
    MatchResultValidationError,
    record_result,
    resolve_winner,
)
from league_engine.services.schedule_service import generate_schedule


@pytest.fixture
def bracket(session: Session, league_factory, team_ids):
    league = league_factory(["A", "B", "C", "D"])
    generate_schedule(session, league.id)
    return league, team_ids(league.id)


@pytest.fixture
def season(session: Session, league_factory, team_ids):
    league = league_factory(["A", "B", "C"], schedule_type="round_robin")
    matches = generate_schedule(session, league.id)
    return league, team_ids(league.id), matches


def _unchanged(match: Match) -> bool:
    return (
        match.status == STATUS_SCHEDULED
        and match.home_score is None
        and match.away_score is None
        and match.winner_id is None
    )


class TestResolveWinner:
    def test_precedence(self):
        m = Match(league_id=1, name="x", match_date=None, home_team_id=1, away_team_id=2)
        assert resolve_winner(m, 0, 5, winner_id=1) == 1
        assert resolve_winner(m, 3, 1) == 1
        assert resolve_winner(m, 1, 3) == 2
        assert resolve_winner(m, 2, 2) is None


class TestRecordResult:
    def test_home_win_completes_and_advances(self, session: Session, bracket):
        league, ids = bracket
        opener = get_bracket_match(session, league.id, 1, 0)

        outcome = record_result(session, opener.id, 3, 1)

        assert outcome.match.status == STATUS_COMPLETED
        assert outcome.match.home_score == 3
        assert outcome.match.away_score == 1
        assert outcome.match.winner_id == ids["A"]
        assert outcome.advanced_to is not None
        assert outcome.advanced_to.home_team_id == ids["A"]

    def test_updated_at_bumped_on_completion(self, session: Session, season):
        _, _, matches = season
        match = matches[0]
        match.updated_at = datetime(2000, 1, 1)
        session.add(match)
        session.commit()

        outcome = record_result(session, match.id, 2, 0)
        assert outcome.match.updated_at > datetime(2000, 1, 1)

    def test_explicit_winner_overrides_scores(self, session: Session, bracket):
        league, ids = bracket
        opener = get_bracket_match(session, league.id, 1, 1)

        outcome = record_result(session, opener.id, 0, 4, winner_id=ids["C"])

        assert outcome.match.winner_id == ids["C"]
        assert get_bracket_match(session, league.id, 2, 0).away_team_id == ids["C"]

    def test_round_robin_tie_has_no_winner_and_no_advance(self, session: Session, season):
        _, _, matches = season
        outcome = record_result(session, matches[0].id, 2, 2)
        assert outcome.match.status == STATUS_COMPLETED
        assert outcome.match.winner_id is None
        assert outcome.advanced_to is None

    def test_round_robin_win_never_advances(self, session: Session, season):
        _, _, matches = season
        outcome = record_result(session, matches[0].id, 5, 0)
        assert outcome.match.winner_id == matches[0].home_team_id
        assert outcome.advanced_to is None

    def test_elimination_tie_without_winner_rejected(self, session: Session, bracket):
        league, _ = bracket
        opener = get_bracket_match(session, league.id, 1, 0)
        with pytest.raises(MatchResultValidationError, match="tie"):
            record_result(session, opener.id, 1, 1)
        session.refresh(opener)
        assert _unchanged(opener)

    def test_elimination_tie_with_explicit_winner_allowed(self, session: Session, bracket):
        league, ids = bracket
        opener = get_bracket_match(session, league.id, 1, 0)
        outcome = record_result(session, opener.id, 1, 1, winner_id=ids["B"])
        assert outcome.match.winner_id == ids["B"]
        assert outcome.advanced_to.home_team_id == ids["B"]

    def test_unresolved_slot_rejected(self, session: Session, bracket):
        league, _ = bracket
        final = get_bracket_match(session, league.id, 2, 0)
        with pytest.raises(MatchResultValidationError, match="Both teams must be set"):
            record_result(session, final.id, 1, 0)
        session.refresh(final)
        assert _unchanged(final)

    @pytest.mark.parametrize("home, away", [(-1, 0), (0, -3)])
    def test_negative_score_rejected(self, session: Session, season, home, away):
        _, _, matches = season
        with pytest.raises(MatchResultValidationError, match="non-negative"):
            record_result(session, matches[0].id, home, away)
        session.refresh(matches[0])
        assert _unchanged(matches[0])

    def test_non_integer_score_rejected(self, session: Session, season):
        _, _, matches = season
        with pytest.raises(MatchResultValidationError, match="integer"):
            record_result(session, matches[0].id, 1.5, 0)

    def test_winner_must_be_participant(self, session: Session, bracket):
        league, ids = bracket
        opener = get_bracket_match(session, league.id, 1, 0)
        with pytest.raises(MatchResultValidationError, match="not a participant"):
            record_result(session, opener.id, 2, 1, winner_id=ids["D"])
        session.refresh(opener)
        assert _unchanged(opener)

    def test_completed_is_terminal(self, session: Session, season):
        _, _, matches = season
        record_result(session, matches[0].id, 1, 0)
        with pytest.raises(MatchResultValidationError, match="terminal"):
            record_result(session, matches[0].id, 0, 1)
        session.refresh(matches[0])
        assert (matches[0].home_score, matches[0].away_score) == (1, 0)

    def test_bye_match_cannot_be_recorded(self, session: Session, league_factory):
        league = league_factory(["A", "B", "C"])
        generate_schedule(session, league.id)
        bye = get_bracket_match(session, league.id, 1, 1)
        with pytest.raises(MatchResultValidationError):
            record_result(session, bye.id, 1, 0)

    def test_unknown_match(self, session: Session):
        with pytest.raises(MatchNotFoundError):
            record_result(session, 12345, 1, 0)

    def test_advances_through_void_sibling(self, session: Session, league_factory, team_ids):
        # Six teams: round 1 slot 3 is BYE vs BYE, so the winner of slot 2 skips round 2
        league = league_factory(["A", "B", "C", "D", "E", "F"])
        generate_schedule(session, league.id)
        ids = team_ids(league.id)

        third = get_bracket_match(session, league.id, 1, 2)
        record_result(session, third.id, 0, 2)

        skipped = get_bracket_match(session, league.id, 2, 1)
        assert skipped.status == STATUS_COMPLETED
        assert skipped.winner_id == ids["F"]
        assert skipped.name == "F (bye)"
        final = get_bracket_match(session, league.id, 3, 0)
        assert final.away_team_id == ids["F"]
