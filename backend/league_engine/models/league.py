from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league_engine.models.match import Match
    from league_engine.models.team import Team

ROUND_ROBIN = "round_robin"
SINGLE_ELIMINATION = "single_elimination"
DOUBLE_ELIMINATION = "double_elimination"

SCHEDULE_TYPES = (ROUND_ROBIN, SINGLE_ELIMINATION, DOUBLE_ELIMINATION)
ELIMINATION_TYPES = (SINGLE_ELIMINATION, DOUBLE_ELIMINATION)


def is_elimination(schedule_type: Optional[str]) -> bool:
    return schedule_type in ELIMINATION_TYPES


class League(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    sport_type: str
    schedule_type: str  # "round_robin" | "single_elimination" | "double_elimination"
    season_start: date
    season_end: Optional[date] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    teams: List["Team"] = Relationship(back_populates="league")
    matches: List["Match"] = Relationship(back_populates="league")
