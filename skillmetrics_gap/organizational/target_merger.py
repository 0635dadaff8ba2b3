"""
目標統合

組織全体の目標と個人目標を、従業員ごとに重複のない1つのビューへ統合する
"""

from typing import Callable, List, Optional, Sequence, Union

from skillmetrics_gap.core.catalog import SkillCatalog
from skillmetrics_gap.core.errors import DataSourceUnavailableError, InvalidInputError
from skillmetrics_gap.core.logging_config import LoggerMixin
from skillmetrics_gap.core.models import (
    AcquiredSkill,
    EmployeeId,
    GapAnalysisResult,
    TargetDefinition,
)
from skillmetrics_gap.matching.match_resolver import MatchResolver, SkillIndex
from skillmetrics_gap.matching.progress import ProgressCalculator


GlobalTargetsInput = Union[
    Sequence[TargetDefinition], Callable[[], Sequence[TargetDefinition]], None
]


class TargetMerger(LoggerMixin):
    """
    グローバル目標と個人目標の統合

    - 目標IDで重複除去し、グローバル目標を優先する
    - グローバル目標のソースが利用できない場合は個人目標のみで結果を返す
    """

    def __init__(
        self,
        resolver: Optional[MatchResolver] = None,
        calculator: Optional[ProgressCalculator] = None,
    ):
        self.resolver = resolver or MatchResolver()
        self.calculator = calculator or ProgressCalculator()

    def merge(
        self,
        global_targets: GlobalTargetsInput,
        individual_targets: Sequence[TargetDefinition],
        acquired_skills: Sequence[AcquiredSkill],
        catalog: SkillCatalog,
        employee_id: Optional[EmployeeId] = None,
    ) -> List[GapAnalysisResult]:
        """
        従業員の目標ごとのギャップ分析結果を返す

        Args:
            global_targets: グローバル目標のリスト、それを返す引数なし関数、
                またはNone（ソース利用不可）
            individual_targets: 個人目標
            acquired_skills: 従業員の習得スキル
            catalog: スキルカタログ
            employee_id: 要求元の従業員ID（指定時は他人の個人目標を除外）

        Returns:
            目標1件につき1つの GapAnalysisResult（グローバル目標が先）
        """
        if catalog is None:
            raise InvalidInputError("catalog", "skill catalog must not be None")
        if individual_targets is None:
            raise InvalidInputError("individual_targets", "individual targets must not be None")
        individual_targets = list(individual_targets)

        index = self.resolver.build_skill_index(acquired_skills)
        globals_ = self._load_global_targets(global_targets, employee_id)

        results: List[GapAnalysisResult] = []
        seen: set = set()

        for target in globals_:
            if self._is_duplicate(target, seen, employee_id):
                continue
            results.append(self._evaluate(target, index, catalog))

        for target in individual_targets:
            if employee_id is not None and target.owner_id not in (None, employee_id):
                self.logger.debug(
                    "individual_target_skipped",
                    target_id=target.id,
                    owner_id=target.owner_id,
                    employee_id=employee_id,
                )
                continue
            if self._is_duplicate(target, seen, employee_id):
                continue
            results.append(self._evaluate(target, index, catalog))

        self.logger.debug(
            "targets_merged",
            employee_id=employee_id,
            global_count=len(globals_),
            individual_count=len(individual_targets),
            result_count=len(results),
        )
        return results

    def _load_global_targets(
        self, global_targets: GlobalTargetsInput, employee_id: Optional[EmployeeId]
    ) -> Sequence[TargetDefinition]:
        """グローバル目標を解決（利用不可の場合は空）"""
        if callable(global_targets):
            try:
                global_targets = global_targets()
            except DataSourceUnavailableError as e:
                self.logger.warning(
                    "global_targets_unavailable", employee_id=employee_id, error=e.to_dict()
                )
                return []
            except OSError as e:
                self.logger.warning(
                    "global_targets_unavailable", employee_id=employee_id, error=repr(e)
                )
                return []

        if global_targets is None:
            self.logger.warning("global_targets_unavailable", employee_id=employee_id, error=None)
            return []
        return list(global_targets)

    def _is_duplicate(
        self, target: TargetDefinition, seen: set, employee_id: Optional[EmployeeId]
    ) -> bool:
        if target.id in seen:
            self.logger.debug(
                "duplicate_target_skipped",
                target_id=target.id,
                scope=target.scope.value,
                employee_id=employee_id,
            )
            return True
        seen.add(target.id)
        return False

    def _evaluate(
        self, target: TargetDefinition, index: SkillIndex, catalog: SkillCatalog
    ) -> GapAnalysisResult:
        prepared = self.resolver.prepare_target(
            target.required_skill_ids, target.target_level, catalog, target.id
        )
        satisfied = self.resolver.satisfied_ids(index, prepared)
        return self.calculator.compute_for_target(target, satisfied, catalog)
