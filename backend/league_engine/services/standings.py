"""
Round-robin standings.

Ranking: wins desc, then score differential desc, then points for desc.
Remaining ties keep team registration order (stable sort).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from sqlmodel import Session, select

from league_engine.models.league import League, is_elimination
from league_engine.models.match import STATUS_COMPLETED, Match
from league_engine.models.team import Team

logger = logging.getLogger(__name__)


@dataclass
class StandingRow:
    team_id: int
    team_name: str
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points_for: int = 0
    points_against: int = 0
    diff: int = 0

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "points_for": self.points_for,
            "points_against": self.points_against,
            "diff": self.diff,
        }


def _rank_key(row: StandingRow):
    return (-row.wins, -row.diff, -row.points_for)


def compute_standings(teams: Sequence[Team], matches: Iterable[Match]) -> List[StandingRow]:
    rows: Dict[int, StandingRow] = {}
    for team in teams:
        rows[team.id] = StandingRow(team_id=team.id, team_name=team.name)

    for match in matches:
        if match.status != STATUS_COMPLETED:
            continue
        if match.home_score is None or match.away_score is None:
            continue
        home = rows.get(match.home_team_id)
        away = rows.get(match.away_team_id)
        if home is None or away is None:
            # Team removed after scheduling
            logger.debug("Skipping match %s: references a team not in the standings", match.id)
            continue

        home.points_for += match.home_score
        home.points_against += match.away_score
        away.points_for += match.away_score
        away.points_against += match.home_score

        if match.home_score > match.away_score:
            home.wins += 1
            away.losses += 1
        elif match.away_score > match.home_score:
            away.wins += 1
            home.losses += 1
        else:
            home.draws += 1
            away.draws += 1

    for row in rows.values():
        row.diff = row.points_for - row.points_against

    return sorted(rows.values(), key=_rank_key)


def get_league_standings(session: Session, league_id: int) -> List[StandingRow]:
    """Standings for a round-robin league; elimination leagues have none."""
    league = session.get(League, league_id)
    if league is None or is_elimination(league.schedule_type):
        return []

    teams = session.exec(select(Team).where(Team.league_id == league_id).order_by(Team.id)).all()
    matches = session.exec(
        select(Match).where(
            Match.league_id == league_id,
            Match.status == STATUS_COMPLETED,
            Match.round_number.is_(None),
        )
    ).all()
    return compute_standings(teams, matches)
