"""Input models validated before they reach the services."""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from league_engine.models.league import SCHEDULE_TYPES


class LeagueCreate(BaseModel):
    name: str = Field(min_length=1)
    sport_type: str = Field(min_length=1)
    schedule_type: str
    season_start: date
    season_end: Optional[date] = None
    team_names: List[str] = Field(min_length=2)

    @field_validator("schedule_type")
    @classmethod
    def _known_schedule_type(cls, v: str) -> str:
        if v not in SCHEDULE_TYPES:
            raise ValueError(f"schedule_type must be one of {', '.join(SCHEDULE_TYPES)}")
        return v

    @field_validator("team_names")
    @classmethod
    def _non_empty_names(cls, v: List[str]) -> List[str]:
        names = [n.strip() for n in v]
        if any(not n for n in names):
            raise ValueError("Team names must not be empty")
        return names

    @model_validator(mode="after")
    def _season_order(self) -> "LeagueCreate":
        if self.season_end is not None and self.season_end < self.season_start:
            raise ValueError("season_end must not be before season_start")
        return self



class LeagueUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    sport_type: Optional[str] = Field(default=None, min_length=1)
    season_start: Optional[date] = None
    season_end: Optional[date] = None

    @model_validator(mode="after")
    def _season_order(self) -> "LeagueUpdate":
        if self.season_start is not None and self.season_end is not None and self.season_end < self.season_start:
            raise ValueError("season_end must not be before season_start")
        return self
