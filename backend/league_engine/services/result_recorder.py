"""
Match result entry: the scheduled -> completed transition.

All validation happens before the match is touched, so a rejected result
leaves no partial write. Completed is terminal; correcting a result means
regenerating the schedule.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session

from league_engine.models.league import League, is_elimination
from league_engine.models.match import STATUS_COMPLETED, Match
from league_engine.services.advancement_service import advance_winner

logger = logging.getLogger(__name__)


class MatchResultError(Exception):
    """Base exception for result recording errors"""
    pass


class MatchNotFoundError(MatchResultError):
    """No match with the given id"""
    pass


class MatchResultValidationError(MatchResultError):
    """Proposed result rejected before any mutation"""
    pass


@dataclass
class RecordOutcome:
    match: Match
    advanced_to: Optional[Match] = None


def _validate_score(label: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MatchResultValidationError(f"{label} must be an integer, got {value!r}")
    if value < 0:
        raise MatchResultValidationError(f"{label} must be non-negative, got {value}")


def resolve_winner(match: Match, home_score: int, away_score: int, winner_id: Optional[int] = None) -> Optional[int]:
    """Explicit winner first, then the higher score; equal scores mean no winner."""
    if winner_id is not None:
        return winner_id
    if home_score > away_score:
        return match.home_team_id
    if away_score > home_score:
        return match.away_team_id
    return None


def record_result(
    session: Session,
    match_id: int,
    home_score: int,
    away_score: int,
    winner_id: Optional[int] = None,
) -> RecordOutcome:
    """
    Record a final score and complete the match.

    For elimination leagues the resolved winner is advanced into the next
    round in the same transaction.

    Raises:
        MatchNotFoundError: unknown match_id
        MatchResultValidationError: match already completed, a team slot is
            still TBD, a negative score, a winner that is not in the match, or
            a tie in an elimination league
    """
    match = session.get(Match, match_id)
    if match is None:
        raise MatchNotFoundError(f"Match {match_id} not found")

    try:
        if match.is_completed:
            raise MatchResultValidationError(f"Match {match_id} is already completed; completed is terminal")
        if match.home_team_id is None or match.away_team_id is None:
            raise MatchResultValidationError("Both teams must be set before recording a result")

        _validate_score("home_score", home_score)
        _validate_score("away_score", away_score)

        if winner_id is not None and winner_id not in (match.home_team_id, match.away_team_id):
            raise MatchResultValidationError(f"Winner {winner_id} is not a participant in match {match_id}")

        resolved_winner = resolve_winner(match, home_score, away_score, winner_id)

        league = session.get(League, match.league_id)
        bracket = league is not None and is_elimination(league.schedule_type)
        if bracket and resolved_winner is None:
            raise MatchResultValidationError(
                f"Match {match_id} is an elimination match and cannot end in a tie without an explicit winner"
            )
    except MatchResultValidationError as exc:
        logger.warning("Rejected result for match %s: %s", match_id, exc)
        raise

    match.home_score = home_score
    match.away_score = away_score
    match.winner_id = resolved_winner
    match.status = STATUS_COMPLETED
    session.add(match)

    advanced_to = None
    try:
        if bracket and match.round_number is not None and match.match_index is not None:
            advanced_to = advance_winner(
                session,
                resolved_winner,
                match.league_id,
                match.round_number,
                match.match_index,
            )
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(match)
    if advanced_to is not None:
        session.refresh(advanced_to)

    logger.info(
        "Recorded match %s: %s-%s winner=%s advanced_to=%s",
        match_id,
        home_score,
        away_score,
        resolved_winner,
        advanced_to.id if advanced_to is not None else None,
    )
    return RecordOutcome(match=match, advanced_to=advanced_to)
