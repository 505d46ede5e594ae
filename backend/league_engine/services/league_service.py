"""
League and roster management.

Teams are registered in order; that order (team id) is the seeding order for
generated schedules and the final tie-break in standings.
"""
import logging
from datetime import datetime
from typing import List

from sqlmodel import Session, select

from league_engine.models.league import League
from league_engine.models.match import Match
from league_engine.models.team import Team
from league_engine.schemas import LeagueCreate, LeagueUpdate

logger = logging.getLogger(__name__)


class LeagueNotFoundError(Exception):
    """Raised when a league id does not exist"""

    pass


class TeamNotFoundError(Exception):
    """Raised when a team id does not exist"""

    pass


def get_league(session: Session, league_id: int) -> League:
    league = session.get(League, league_id)
    if league is None:
        raise LeagueNotFoundError(f"League {league_id} not found")
    return league


def list_leagues(session: Session) -> List[League]:
    """All leagues, newest first"""
    return list(session.exec(select(League).order_by(League.created_at.desc(), League.id.desc())).all())


def create_league(session: Session, payload: LeagueCreate) -> League:
    league = League(
        name=payload.name,
        sport_type=payload.sport_type,
        schedule_type=payload.schedule_type,
        season_start=payload.season_start,
        season_end=payload.season_end,
    )
    session.add(league)
    session.flush()

    for name in payload.team_names:
        session.add(Team(league_id=league.id, name=name))

    session.commit()
    session.refresh(league)
    logger.info("Created league %s (%s) with %d teams", league.id, league.schedule_type, len(payload.team_names))
    return league


def update_league(session: Session, league_id: int, payload: LeagueUpdate) -> League:
    """
    Apply the fields set on payload. Schedule type and roster are not editable
    here; existing fixtures keep their dates.

    Raises:
        LeagueNotFoundError: unknown league_id
        ValueError: the resulting season would end before it starts
    """
    league = get_league(session, league_id)
    # season_end is the only nullable column; None elsewhere means "leave as is"
    update_data = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field == "season_end"
    }

    season_start = update_data.get("season_start", league.season_start)
    season_end = update_data.get("season_end", league.season_end)
    if season_end is not None and season_end < season_start:
        raise ValueError("season_end must not be before season_start")

    for field, value in update_data.items():
        setattr(league, field, value)

    league.updated_at = datetime.utcnow()
    session.add(league)
    session.commit()
    session.refresh(league)
    logger.info("Updated league %s: %s", league_id, ", ".join(sorted(update_data)) or "no fields")
    return league


def list_teams(session: Session, league_id: int) -> List[Team]:
    return list(session.exec(select(Team).where(Team.league_id == league_id).order_by(Team.id)).all())


def add_team(session: Session, league_id: int, name: str) -> Team:
    get_league(session, league_id)
    name = name.strip()
    if not name:
        raise ValueError("Team name is required")

    team = Team(league_id=league_id, name=name)
    session.add(team)
    session.commit()
    session.refresh(team)
    return team


def remove_team(session: Session, team_id: int) -> None:
    """Delete a team. Generated fixtures keep their slot ids until regeneration."""
    team = session.get(Team, team_id)
    if team is None:
        raise TeamNotFoundError(f"Team {team_id} not found")
    session.delete(team)
    session.commit()


def delete_league(session: Session, league_id: int) -> None:
    league = get_league(session, league_id)
    for match in session.exec(select(Match).where(Match.league_id == league_id)).all():
        session.delete(match)
    for team in session.exec(select(Team).where(Team.league_id == league_id)).all():
        session.delete(team)
    session.delete(league)
    session.commit()
    logger.info("Deleted league %s", league_id)
