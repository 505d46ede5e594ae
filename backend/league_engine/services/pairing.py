"""
Pairing generation for round-robin seasons and elimination brackets.

Pure functions over an ordered list of team ids. Nothing here touches the
database; callers turn the returned rounds into Match rows.

Round robin (circle method):
    4 teams -> R1: (1,4) (2,3)   R2: (1,3) (4,2)   R3: (1,2) (3,4)
    Odd counts get a BYE marker; any pair containing it is dropped.

Elimination:
    Team list padded with BYE up to the next power of two. Round 1 pairs
    consecutive entries; every later round is TBD vs TBD placeholders that
    advancement fills in.
"""

from __future__ import annotations

import math
from typing import Any, Hashable, List, Sequence, Tuple

BYE = "__bye__"
TBD = "__tbd__"

Pairing = Tuple[Any, Any]


def is_placeholder(value: Any) -> bool:
    return value == BYE or value == TBD


def bracket_size(num_teams: int) -> int:
    """Next power of two >= num_teams."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def round_count(num_teams: int) -> int:
    """Number of elimination rounds for num_teams (1 round = the final only)."""
    size = bracket_size(num_teams)
    if size < 2:
        return 0
    return int(math.log2(size))


def _require_two(team_ids: Sequence[Hashable]) -> None:
    if len(team_ids) < 2:
        raise ValueError(f"Need at least 2 teams, got {len(team_ids)}")
    if len(set(team_ids)) != len(team_ids):
        raise ValueError("Team ids must be unique")
    if any(is_placeholder(t) for t in team_ids):
        raise ValueError(f"Team ids must not use reserved markers {BYE!r} / {TBD!r}")


def round_robin_pairings(team_ids: Sequence[Hashable]) -> List[List[Pairing]]:
    """
    Circle-method round robin.

    Returns one list of (home, away) pairs per round: N-1 rounds for even N,
    N rounds for odd N (each team sits out exactly once). Home/away is left as
    the rotation produces it and is not balanced.
    """
    _require_two(team_ids)

    ids: List[Any] = list(team_ids)
    if len(ids) % 2 == 1:
        ids.append(BYE)

    n = len(ids)
    fixed = ids[0]
    rotating = ids[1:]
    rounds: List[List[Pairing]] = []

    for _ in range(n - 1):
        current = [fixed] + rotating
        pairs: List[Pairing] = []
        for i in range(n // 2):
            home, away = current[i], current[n - 1 - i]
            if home == BYE or away == BYE:
                continue
            pairs.append((home, away))
        rounds.append(pairs)
        # Last rotating entry moves to the front
        rotating = [rotating[-1]] + rotating[:-1]

    return rounds


def elimination_rounds(team_ids: Sequence[Hashable]) -> List[List[Pairing]]:
    """
    Power-of-two knockout bracket.

    Round 1 holds size/2 pairs of (padded[2i], padded[2i+1]); byes sit at the
    tail of the padded list so a bye pair is (team, BYE) or (BYE, BYE). Each
    later round halves down to the single-match final and is all (TBD, TBD).
    """
    _require_two(team_ids)

    size = bracket_size(len(team_ids))
    padded: List[Any] = list(team_ids) + [BYE] * (size - len(team_ids))

    rounds: List[List[Pairing]] = [[(padded[i], padded[i + 1]) for i in range(0, size, 2)]]

    matches_in_round = size // 4
    while matches_in_round >= 1:
        rounds.append([(TBD, TBD) for _ in range(matches_in_round)])
        matches_in_round //= 2

    return rounds
