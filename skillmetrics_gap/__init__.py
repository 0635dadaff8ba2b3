"""
スキル目標マッチング・組織ギャップ分析エンジン

スキルカタログ、従業員の習得スキル、スキル目標から
目標ごとの充足状況・進捗率・ギャップと、組織全体の要改善人数を計算する
"""

from skillmetrics_gap.core.config import Config, get_config
from skillmetrics_gap.core.catalog import SkillCatalog
from skillmetrics_gap.core.levels import ProficiencyLevel, ordinal
from skillmetrics_gap.core.models import (
    AcquiredSkill,
    ActivityEvent,
    GapAnalysisResult,
    OrgTargetSummary,
    SkillDefinition,
    TargetDefinition,
    TargetScope,
)
from skillmetrics_gap.matching import MatchResolver, ProgressCalculator
from skillmetrics_gap.organizational import OrgAggregator, TargetMerger
from skillmetrics_gap.activity import ActivityMerger
from skillmetrics_gap.core.gap_analysis_system import GapAnalysisSystem

__version__ = "1.0.0"
__all__ = [
    "Config",
    "get_config",
    "SkillCatalog",
    "ProficiencyLevel",
    "ordinal",
    "AcquiredSkill",
    "ActivityEvent",
    "GapAnalysisResult",
    "OrgTargetSummary",
    "SkillDefinition",
    "TargetDefinition",
    "TargetScope",
    "MatchResolver",
    "ProgressCalculator",
    "OrgAggregator",
    "TargetMerger",
    "ActivityMerger",
    "GapAnalysisSystem",
]
