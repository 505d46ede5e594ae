from datetime import date
from typing import Callable, Dict, List

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from league_engine.models.league import League
from league_engine.models.match import Match  # noqa: F401
from league_engine.models.team import Team

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so every session shares one DB
# 2. All models are imported (tests/__init__.py) before create_all()
# 3. Tables are created and dropped per test for isolation
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema."""
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="league_factory")
def league_factory_fixture(session: Session) -> Callable[..., League]:
    """Create a league with teams registered in the given order."""

    def _make(
        team_names: List[str],
        schedule_type: str = "single_elimination",
        season_start: date = date(2026, 3, 2),
        name: str = "Test League",
    ) -> League:
        league = League(
            name=name,
            sport_type="basketball",
            schedule_type=schedule_type,
            season_start=season_start,
        )
        session.add(league)
        session.commit()
        session.refresh(league)

        for team_name in team_names:
            session.add(Team(league_id=league.id, name=team_name))
        session.commit()
        session.refresh(league)
        return league

    return _make


@pytest.fixture(name="team_ids")
def team_ids_fixture(session: Session) -> Callable[[int], Dict[str, int]]:
    """Map team name -> id for a league."""

    def _lookup(league_id: int) -> Dict[str, int]:
        teams = session.exec(select(Team).where(Team.league_id == league_id)).all()
        return {t.name: t.id for t in teams}

    return _lookup
