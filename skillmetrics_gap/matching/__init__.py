"""
スキル目標マッチング

従業員単位の充足判定と進捗計算
"""

__all__ = ["MatchResolver", "PreparedTarget", "ProgressCalculator", "progress_percent"]

from skillmetrics_gap.matching.match_resolver import MatchResolver, PreparedTarget
from skillmetrics_gap.matching.progress import ProgressCalculator, progress_percent
