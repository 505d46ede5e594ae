"""
Implicit bracket wiring.

Elimination matches are addressed by (round_number, match_index) and no match
stores a pointer to the next one. Sibling matches (2k, 2k+1) in round r feed
match k of round r+1: the even sibling fills the home slot, the odd sibling
the away slot.
"""

from typing import List, Optional, Tuple

Position = Tuple[int, int]

TBD_LABEL = "TBD"
VOID_LABEL = "BYE"


def downstream_position(round_number: int, match_index: int) -> Position:
    return round_number + 1, match_index // 2


def feeds_home_slot(match_index: int) -> bool:
    return match_index % 2 == 0


def sibling_index(match_index: int) -> int:
    return match_index ^ 1


def feeder_positions(round_number: int, match_index: int) -> List[Position]:
    """Upstream (home feeder, away feeder) positions; round 1 has none."""
    if round_number <= 1:
        return []
    return [
        (round_number - 1, 2 * match_index),
        (round_number - 1, 2 * match_index + 1),
    ]


def display_name(home_name: Optional[str], away_name: Optional[str]) -> str:
    return f"{home_name or TBD_LABEL} vs {away_name or TBD_LABEL}"


def bye_name(team_name: Optional[str]) -> str:
    return f"{team_name or TBD_LABEL} (bye)"
