from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league_engine.models.league import League

STATUS_SCHEDULED = "scheduled"
STATUS_COMPLETED = "completed"


class Match(SQLModel, table=True):
    __table_args__ = (
        # Bracket addressing; round-robin rows leave both columns NULL
        SAUniqueConstraint("league_id", "round_number", "match_index", name="uq_match_bracket_position"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    league_id: int = Field(foreign_key="league.id", index=True)
    name: str
    match_date: date

    # Elimination formats only
    round_number: Optional[int] = Field(default=None)
    match_index: Optional[int] = Field(default=None)

    # Team slots are plain ids: removing a team must not touch generated fixtures
    home_team_id: Optional[int] = Field(default=None, index=True)
    away_team_id: Optional[int] = Field(default=None, index=True)

    home_score: Optional[int] = Field(default=None)
    away_score: Optional[int] = Field(default=None)
    winner_id: Optional[int] = Field(default=None)
    status: str = Field(default=STATUS_SCHEDULED)  # "scheduled" | "completed"

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    league: "League" = Relationship(back_populates="matches")

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def is_void(self) -> bool:
        """Completed bracket slot with no teams and no winner (both feeders were byes)."""
        return (
            self.status == STATUS_COMPLETED
            and self.home_team_id is None
            and self.away_team_id is None
            and self.winner_id is None
        )
