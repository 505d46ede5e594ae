"""
Bracket advancement: when an elimination match is completed, write its winner
into the single downstream match it feeds.

The downstream match is found by coordinates (round_number + 1, match_index // 2)
within the same league; nothing stores an explicit link. Only team slots, the
display name and (for byes) the completion state of downstream matches are
touched. None of these functions commit; the caller owns the transaction.
"""
import logging
from typing import Dict, Optional

from sqlmodel import Session, select

from league_engine.models.league import League, is_elimination
from league_engine.models.match import STATUS_COMPLETED, Match
from league_engine.models.team import Team
from league_engine.services.bracket_graph import (
    bye_name,
    display_name,
    downstream_position,
    feeds_home_slot,
    sibling_index,
)

logger = logging.getLogger(__name__)


def get_bracket_match(session: Session, league_id: int, round_number: int, match_index: int) -> Optional[Match]:
    return session.exec(
        select(Match).where(
            Match.league_id == league_id,
            Match.round_number == round_number,
            Match.match_index == match_index,
        )
    ).first()


def _team_name(session: Session, team_id: Optional[int]) -> Optional[str]:
    if team_id is None:
        return None
    team = session.get(Team, team_id)
    return team.name if team else None


def advance_winner(
    session: Session,
    winner_id: int,
    league_id: int,
    from_round: int,
    from_match_index: int,
) -> Optional[Match]:
    """
    Place winner_id into the downstream match of (from_round, from_match_index).

    Even indices fill the home slot, odd indices the away slot. The write is an
    overwrite, so repeating the call leaves the target unchanged. Returns the
    updated target, or None when there is no downstream match (the final).

    If the sibling feeder is a void slot (double bye), the target can never
    receive an opponent: it is completed as a bye for winner_id and the winner
    is advanced again from there.
    """
    to_round, to_index = downstream_position(from_round, from_match_index)
    target = get_bracket_match(session, league_id, to_round, to_index)
    if target is None:
        logger.debug(
            "No downstream match for league %s R%s#%s; winner %s is terminal",
            league_id,
            from_round,
            from_match_index,
            winner_id,
        )
        return None

    if feeds_home_slot(from_match_index):
        target.home_team_id = winner_id
    else:
        target.away_team_id = winner_id

    sibling = get_bracket_match(session, league_id, from_round, sibling_index(from_match_index))
    if sibling is not None and sibling.is_void:
        target.status = STATUS_COMPLETED
        target.winner_id = winner_id
        target.name = bye_name(_team_name(session, winner_id))
        session.add(target)
        session.flush()
        logger.debug("League %s R%s#%s resolved as bye for team %s", league_id, to_round, to_index, winner_id)
        advance_winner(session, winner_id, league_id, to_round, to_index)
        return target

    target.name = display_name(
        _team_name(session, target.home_team_id),
        _team_name(session, target.away_team_id),
    )
    session.add(target)
    session.flush()
    return target


def apply_advancement_for_completed_match(session: Session, match: Match) -> Optional[Match]:
    """
    Advance the winner of a completed bracket match.

    No-op (returns None) for round-robin matches, unfinished matches, ties and
    the final.
    """
    if not match.is_completed or match.winner_id is None:
        return None
    if match.round_number is None or match.match_index is None:
        return None
    return advance_winner(session, match.winner_id, match.league_id, match.round_number, match.match_index)


def _count_unknown(session: Session, league_id: int) -> int:
    matches = session.exec(select(Match).where(Match.league_id == league_id)).all()
    return sum(
        1
        for m in matches
        if not m.is_completed and (m.home_team_id is None or m.away_team_id is None)
    )


def resolve_all_dependencies(session: Session, league_id: int) -> Dict[str, int]:
    """
    Re-run advancement for every completed bracket match in a league.

    Used after bulk-importing results or to repair an interrupted advancement.

    Returns:
        Dict with:
        - matches_processed: completed matches with a winner that were replayed
        - slots_filled: downstream slots whose team actually changed
        - unknown_before: open matches still missing a team before the replay
        - unknown_after: open matches still missing a team after the replay

    Guarantees:
        - Idempotent (safe to call multiple times)
        - Deterministic ordering (round_number, then match_index)
        - Single commit at the end
    """
    league = session.get(League, league_id)
    if league is None or not is_elimination(league.schedule_type):
        return {"matches_processed": 0, "slots_filled": 0, "unknown_before": 0, "unknown_after": 0}

    unknown_before = _count_unknown(session, league_id)

    completed = session.exec(
        select(Match)
        .where(
            Match.league_id == league_id,
            Match.status == STATUS_COMPLETED,
            Match.winner_id.is_not(None),
            Match.round_number.is_not(None),
        )
        .order_by(Match.round_number, Match.match_index)
    ).all()

    matches_processed = 0
    slots_filled = 0
    for match in completed:
        target = get_bracket_match(session, league_id, *downstream_position(match.round_number, match.match_index))
        slot = "home_team_id" if feeds_home_slot(match.match_index) else "away_team_id"
        before = getattr(target, slot) if target is not None else None

        apply_advancement_for_completed_match(session, match)
        matches_processed += 1
        if target is not None and getattr(target, slot) != before:
            slots_filled += 1

    session.commit()
    unknown_after = _count_unknown(session, league_id)

    logger.info(
        "Resolved dependencies for league %s: processed=%d filled=%d unknown %d -> %d",
        league_id,
        matches_processed,
        slots_filled,
        unknown_before,
        unknown_after,
    )
    return {
        "matches_processed": matches_processed,
        "slots_filled": slots_filled,
        "unknown_before": unknown_before,
        "unknown_after": unknown_after,
    }
