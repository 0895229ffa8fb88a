# daily_challenge/boost.py
"""
Comeback boost: users behind the leader earn amplified daily points.

The multiplier only scales freshly earned daily points, never the stored
total, so a boosted user closes the gap but can't overtake passively.
"""
from typing import NamedTuple, Optional

DEFAULT_TIER = "Lil Bitch"
TOP_TIER = "LEGEND"

# weakest -> strongest
TIER_ORDER = ["Lil Bitch", "SAVAGE", "WARRIOR", "BEAST MODE", "LEGEND"]

TIER_ICONS = {
    "Lil Bitch": "🍆",
    "BEAST MODE": "🔥",
    "WARRIOR": "⚡",
    "SAVAGE": "💀",
    "LEGEND": "👑",
}


class Boost(NamedTuple):
    multiplier: float
    ratio: Optional[str]


BOOSTS = {
    "Lil Bitch": Boost(2.0, "1:1"),
    "BEAST MODE": Boost(1.5, "2:1"),
    "WARRIOR": Boost(1.333, "3:1"),
    "SAVAGE": Boost(1.25, "4:1"),
}

NO_OP_BOOST = Boost(1.0, None)


def boost_for(rank, total_points, max_leaderboard_points, tier) -> Optional[Boost]:
    """
    Returns None when no boost applies:
      - rank unknown, or rank 1
      - the user already has the most points
      - the user holds the top tier
    Unknown tier names get a multiplier of 1.
    """
    if not rank or rank == 1:
        return None
    if (total_points or 0) >= (max_leaderboard_points or 0):
        return None
    if tier == TOP_TIER:
        return None
    return BOOSTS.get(tier, NO_OP_BOOST)


def badge_icon(tier: Optional[str]) -> str:
    if not tier:
        return TIER_ICONS[DEFAULT_TIER]
    for name, icon in TIER_ICONS.items():
        if name != DEFAULT_TIER and name.split()[0] in tier:
            return icon
    return TIER_ICONS[DEFAULT_TIER]
