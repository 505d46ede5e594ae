from league_engine.models.league import League
from league_engine.models.match import Match
from league_engine.models.team import Team

__all__ = [
    "League",
    "Match",
    "Team",
]
