"""
習熟度レベルの定義

beginner < intermediate < expert の全順序。
未知の値は序数を持たない（None）。0 として比較してはならない。
"""

from enum import Enum
from typing import Any, Optional


class ProficiencyLevel(Enum):
    """習熟度レベル"""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"

    @property
    def ordinal(self) -> int:
        return _ORDINALS[self]


_ORDINALS = {
    ProficiencyLevel.BEGINNER: 1,
    ProficiencyLevel.INTERMEDIATE: 2,
    ProficiencyLevel.EXPERT: 3,
}


def parse_level(level: Any) -> Optional[ProficiencyLevel]:
    """
    任意の値を ProficiencyLevel に変換

    Args:
        level: レベル（ProficiencyLevel または文字列、大文字小文字・前後空白は無視）

    Returns:
        ProficiencyLevel。未知の値は None
    """
    if isinstance(level, ProficiencyLevel):
        return level
    if not isinstance(level, str):
        return None
    try:
        return ProficiencyLevel(level.strip().lower())
    except ValueError:
        return None


def ordinal(level: Any) -> Optional[int]:
    """
    レベルの序数を取得

    Returns:
        1/2/3。未知の値は None
    """
    parsed = parse_level(level)
    if parsed is None:
        return None
    return parsed.ordinal

