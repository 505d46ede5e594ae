"""
Services Layer

Scheduling and bracket logic that:
- Accepts domain inputs (team ids, league ids, sessions)
- Returns domain outputs (fixture plans, models, standings rows)
- Does NOT depend on any transport layer
- Commits only at the public mutating entry points
"""
