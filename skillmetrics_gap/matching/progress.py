"""
進捗計算

充足スキル数 / 必須スキル数 から進捗率・ギャップ・達成フラグを求める
"""

from dataclasses import replace
from typing import Hashable, Iterable, Optional

from skillmetrics_gap.core.catalog import SkillCatalog
from skillmetrics_gap.core.errors import InvalidInputError
from skillmetrics_gap.core.models import GapAnalysisResult, SkillId, TargetDefinition


def progress_percent(acquired: int, total: int) -> int:
    """
    進捗率（四捨五入、整数演算で厳密に計算）

    total が0の場合は0。未充足が残る場合は100に丸めず99を上限とする

    Examples:
        >>> progress_percent(1, 3)
        33
        >>> progress_percent(2, 3)
        67
        >>> progress_percent(1, 8)
        13
    """
    if total <= 0:
        return 0
    percent = (200 * acquired + total) // (2 * total)
    if acquired < total:
        return min(percent, 99)
    return percent


class ProgressCalculator:
    """必須スキルと充足スキルからギャップ分析結果を生成"""

    def compute(
        self,
        required_skill_ids: Iterable[SkillId],
        satisfied_ids: Iterable[SkillId],
        catalog: SkillCatalog,
        target_id: Optional[Hashable] = None,
    ) -> GapAnalysisResult:
        """
        ギャップ分析結果を計算

        分母はカタログで解決できる必須スキルIDのみ（未登録IDは分子・分母の両方から除外）

        Args:
            required_skill_ids: 目標の必須スキルID
            satisfied_ids: MatchResolver が返した充足ID
            catalog: スキルカタログ
            target_id: 目標ID

        Returns:
            GapAnalysisResult（employees_needing_improvement は未設定）
        """
        if catalog is None:
            raise InvalidInputError("catalog", "skill catalog must not be None")
        if required_skill_ids is None:
            raise InvalidInputError("required_skill_ids", "required skill ids must not be None")
        if satisfied_ids is None:
            raise InvalidInputError("satisfied_ids", "satisfied ids must not be None")

        resolved = catalog.resolve_ids(required_skill_ids, target_id=target_id, warn=False)
        satisfied = frozenset(satisfied_ids).intersection(resolved)
        return self.from_counts(len(resolved), len(satisfied), target_id, satisfied)

    @staticmethod
    def from_counts(
        total: int,
        acquired: int,
        target_id: Optional[Hashable] = None,
        satisfied_ids: frozenset = frozenset(),
    ) -> GapAnalysisResult:
        """件数から結果を組み立てる"""
        acquired = max(0, min(acquired, total))
        percent = progress_percent(acquired, total)
        return GapAnalysisResult(
            target_id=target_id,
            total_target_skills=total,
            acquired_skills=acquired,
            progress_percent=percent,
            skill_gap=total - acquired,
            is_completed=total > 0 and acquired == total,
            satisfied_skill_ids=frozenset(satisfied_ids),
        )

    def compute_for_target(
        self,
        target: TargetDefinition,
        satisfied_ids: Iterable[SkillId],
        catalog: SkillCatalog,
    ) -> GapAnalysisResult:
        """目標の表示用情報を付与した結果を返す"""
        result = self.compute(target.required_skill_ids, satisfied_ids, catalog, target_id=target.id)
        return replace(
            result,
            target_name=target.display_name,
            scope=target.scope,
            target_level=target.target_level,
            target_date=target.target_date,
        )
