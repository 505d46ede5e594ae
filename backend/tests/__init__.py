# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from league_engine.models.league import League  # noqa: F401
from league_engine.models.match import Match  # noqa: F401
from league_engine.models.team import Team  # noqa: F401
