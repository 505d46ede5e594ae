"""
Schedule generation for a league.

plan_fixtures() is the pure half: teams + format + season start in, an ordered
list of fixture records out. generate_schedule() persists that plan as an
atomic replace of the league's matches and auto-advances bye winners.

Round dates are fixed weekly offsets from the season start:
    round_date = season_start + round_idx weeks
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence

from sqlmodel import Session, select

from league_engine.models.league import ROUND_ROBIN, SCHEDULE_TYPES, League, is_elimination
from league_engine.models.match import STATUS_COMPLETED, STATUS_SCHEDULED, Match
from league_engine.models.team import Team
from league_engine.services.advancement_service import advance_winner
from league_engine.services.bracket_graph import VOID_LABEL, bye_name, display_name, feeder_positions
from league_engine.services.pairing import BYE, TBD, elimination_rounds, round_robin_pairings

logger = logging.getLogger(__name__)


class ScheduleGenerationError(Exception):
    """Raised when a schedule cannot be generated for a league"""

    pass


@dataclass
class FixturePlan:
    """One fixture ready for bulk insertion."""

    round_idx: int  # 0-based; drives the date for every format
    round_number: Optional[int]  # bracket coordinates, None for round robin
    match_index: Optional[int]
    home_team_id: Optional[int]
    away_team_id: Optional[int]
    match_date: date
    name: str
    status: str = STATUS_SCHEDULED
    winner_id: Optional[int] = None

    @property
    def is_bye(self) -> bool:
        return self.status == STATUS_COMPLETED and self.winner_id is not None

    def to_match(self, league_id: int) -> Match:
        return Match(
            league_id=league_id,
            name=self.name,
            match_date=self.match_date,
            round_number=self.round_number,
            match_index=self.match_index,
            home_team_id=self.home_team_id,
            away_team_id=self.away_team_id,
            winner_id=self.winner_id,
            status=self.status,
        )


def round_date(season_start: date, round_idx: int) -> date:
    return season_start + timedelta(weeks=round_idx)


def _plan_round_robin(teams: Sequence[Team], season_start: date) -> List[FixturePlan]:
    names = {t.id: t.name for t in teams}
    plans: List[FixturePlan] = []
    for round_idx, pairs in enumerate(round_robin_pairings([t.id for t in teams])):
        for home_id, away_id in pairs:
            plans.append(
                FixturePlan(
                    round_idx=round_idx,
                    round_number=None,
                    match_index=None,
                    home_team_id=home_id,
                    away_team_id=away_id,
                    match_date=round_date(season_start, round_idx),
                    name=display_name(names[home_id], names[away_id]),
                )
            )
    return plans


def _plan_elimination(teams: Sequence[Team], season_start: date) -> List[FixturePlan]:
    """
    Bracket plan. Round 1 pair kinds:
    - (team, team): scheduled
    - (team, BYE):  completed, team is the winner, away slot empty
    - (BYE, BYE):   void (completed, no teams, no winner)
    A later-round match is void when both of its feeders are void; otherwise it
    is a scheduled TBD vs TBD placeholder.
    """
    names = {t.id: t.name for t in teams}
    plans: List[FixturePlan] = []
    void_positions = set()

    for round_idx, pairs in enumerate(elimination_rounds([t.id for t in teams])):
        round_number = round_idx + 1
        when = round_date(season_start, round_idx)
        for match_index, (slot_a, slot_b) in enumerate(pairs):
            plan = FixturePlan(
                round_idx=round_idx,
                round_number=round_number,
                match_index=match_index,
                home_team_id=None,
                away_team_id=None,
                match_date=when,
                name=display_name(None, None),
            )
            if slot_a == TBD:
                feeders = feeder_positions(round_number, match_index)
                if all(pos in void_positions for pos in feeders):
                    plan.status = STATUS_COMPLETED
                    plan.name = VOID_LABEL
                    void_positions.add((round_number, match_index))
            elif slot_a == BYE and slot_b == BYE:
                plan.status = STATUS_COMPLETED
                plan.name = VOID_LABEL
                void_positions.add((round_number, match_index))
            elif slot_a == BYE or slot_b == BYE:
                real_id = slot_b if slot_a == BYE else slot_a
                plan.home_team_id = real_id
                plan.winner_id = real_id
                plan.status = STATUS_COMPLETED
                plan.name = bye_name(names[real_id])
            else:
                plan.home_team_id = slot_a
                plan.away_team_id = slot_b
                plan.name = display_name(names[slot_a], names[slot_b])
            plans.append(plan)

    return plans


def plan_fixtures(teams: Sequence[Team], schedule_type: str, season_start: date) -> List[FixturePlan]:
    """
    Ordered fixture list for the given teams (registration order) and format.

    Raises:
        ScheduleGenerationError: unknown format or fewer than 2 teams
    """
    if schedule_type not in SCHEDULE_TYPES:
        raise ScheduleGenerationError(f"Unknown schedule type: {schedule_type}")
    if len(teams) < 2:
        raise ScheduleGenerationError(f"Need at least 2 teams, got {len(teams)}")

    try:
        if schedule_type == ROUND_ROBIN:
            return _plan_round_robin(teams, season_start)
        return _plan_elimination(teams, season_start)
    except ValueError as exc:
        raise ScheduleGenerationError(str(exc)) from exc


def _league_teams(session: Session, league_id: int) -> List[Team]:
    return list(session.exec(select(Team).where(Team.league_id == league_id).order_by(Team.id)).all())


def generate_schedule(session: Session, league_id: int) -> List[Match]:
    """
    Replace every match of the league with a freshly generated schedule.

    Delete, insert and bye advancement share one transaction; on failure it is
    rolled back and the previous schedule stays in place.
    """
    league = session.get(League, league_id)
    if league is None:
        raise ScheduleGenerationError(f"League {league_id} not found")

    teams = _league_teams(session, league_id)
    plans = plan_fixtures(teams, league.schedule_type, league.season_start)

    try:
        existing = session.exec(select(Match).where(Match.league_id == league_id)).all()
        for match in existing:
            session.delete(match)
        # Deletes must hit the DB before inserts reuse the bracket positions
        session.flush()

        matches = [plan.to_match(league_id) for plan in plans]
        session.add_all(matches)
        session.flush()

        if is_elimination(league.schedule_type):
            for plan, match in zip(plans, matches):
                if plan.is_bye:
                    advance_winner(session, match.winner_id, league_id, match.round_number, match.match_index)

        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Schedule generation failed for league %s", league_id)
        raise

    for match in matches:
        session.refresh(match)

    logger.info(
        "Generated %s schedule for league %s: teams=%d matches=%d",
        league.schedule_type,
        league_id,
        len(teams),
        len(matches),
    )
    return matches


def regenerate_schedule(session: Session, league_id: int) -> List[Match]:
    """Discard the league's fixtures (including recorded results) and generate again."""
    logger.info("Regenerating schedule for league %s; existing matches and results are discarded", league_id)
    return generate_schedule(session, league_id)


def get_league_schedule(session: Session, league_id: int) -> List[Match]:
    return list(
        session.exec(
            select(Match)
            .where(Match.league_id == league_id)
            .order_by(Match.match_date, Match.round_number, Match.match_index, Match.id)
        ).all()
    )

