"""
スキル概要メトリクス

習熟度レベル分布、上位スキル、期限切れ目標などの表示用指標を計算
"""

import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from skillmetrics_gap.core.levels import ProficiencyLevel, ordinal, parse_level
from skillmetrics_gap.core.models import AcquiredSkill, GapAnalysisResult, TargetDefinition
from skillmetrics_gap.utils.data_normalizers import parse_date, parse_timestamp

logger = logging.getLogger(__name__)

UNKNOWN_LEVEL = "unknown"


def _round_percent(count: int, total: int) -> int:
    if total <= 0:
        return 0
    return (200 * count + total) // (2 * total)


def calculate_level_distribution(acquired_skills: Iterable[AcquiredSkill]) -> Dict[str, Any]:
    """
    習熟度レベルの分布を計算

    Args:
        acquired_skills: 習得スキル

    Returns:
        分布情報の辞書
        - total: スキル総数
        - counts: レベル -> 件数（expert, intermediate, beginner, unknown）
        - percentages: レベル -> 割合（整数%、四捨五入）
    """
    levels = pd.Series(
        [
            parsed.value if parsed is not None else UNKNOWN_LEVEL
            for parsed in (parse_level(skill.level) for skill in acquired_skills)
        ],
        dtype="object",
    )
    value_counts = levels.value_counts()

    keys = [level.value for level in reversed(list(ProficiencyLevel))] + [UNKNOWN_LEVEL]
    counts = {key: int(value_counts.get(key, 0)) for key in keys}
    total = len(levels)

    if counts[UNKNOWN_LEVEL]:
        logger.warning(f"不明な習熟度レベルのスキルが{counts[UNKNOWN_LEVEL]}件あります")

    return {
        "total": total,
        "counts": counts,
        "percentages": {key: _round_percent(count, total) for key, count in counts.items()},
    }


def rank_top_skills(acquired_skills: Iterable[AcquiredSkill], n: int = 3) -> List[AcquiredSkill]:
    """
    上位スキルを抽出

    レベルの高い順、同レベルでは更新日時の新しい順。
    レベル不明は最後、更新日時が欠損・不正なものは同レベル内で最後。

    Args:
        acquired_skills: 習得スキル
        n: 抽出件数

    Returns:
        上位n件
    """
    def sort_key(skill: AcquiredSkill):
        level_ordinal = ordinal(skill.level)
        level_key = (0, -level_ordinal) if level_ordinal is not None else (1, 0)
        updated = parse_timestamp(skill.last_updated)
        date_key = (0, -updated.value) if updated is not None else (1, 0)
        return level_key + date_key

    return sorted(acquired_skills, key=sort_key)[:max(n, 0)]


def find_overdue_targets(
    targets: Sequence[TargetDefinition],
    results: Iterable[GapAnalysisResult],
    today: Optional[datetime.date] = None,
) -> List[TargetDefinition]:
    """
    期限切れの未達成目標を抽出

    Args:
        targets: 目標
        results: 同じ従業員のギャップ分析結果（目標IDで突き合わせ）
        today: 基準日（省略時は当日）

    Returns:
        期限が基準日より前で、未達成の目標
    """
    if today is None:
        today = datetime.date.today()

    completed = {result.target_id for result in results if result.is_completed}

    overdue = []
    for target in targets:
        if target.target_date is None:
            continue
        due = parse_date(target.target_date)
        if due is None:
            logger.warning(f"目標 {target.id} の期限を解釈できません: {target.target_date!r}")
            continue
        if due < today and target.id not in completed:
            overdue.append(target)

    logger.info(f"期限切れ目標数: {len(overdue)}件")
    return overdue
