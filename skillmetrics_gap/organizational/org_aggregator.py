"""
組織ギャップ集計エンジン

全従業員 × 全目標について充足判定を行い、目標ごとに
改善が必要な従業員数を集計する
"""

import time
import threading
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from skillmetrics_gap.core.catalog import SkillCatalog
from skillmetrics_gap.core.errors import (
    AggregationCancelledError,
    InvalidInputError,
    InvalidParameterError,
)
from skillmetrics_gap.core.logging_config import LoggerMixin
from skillmetrics_gap.core.models import (
    AcquiredSkill,
    EmployeeId,
    OrgTargetSummary,
    TargetDefinition,
    TargetId,
)
from skillmetrics_gap.matching.match_resolver import MatchResolver, PreparedTarget


EmployeeShard = List[Tuple[EmployeeId, Sequence[AcquiredSkill]]]

# カウンタ行列の行
_NEEDING_ROW = 0
_COMPLETED_ROW = 1


class OrgAggregator(LoggerMixin):
    """
    組織全体のスキルギャップ集計

    - 従業員ごとの習得スキルは1パスにつき1回だけインデックス化
    - 目標の必須スキルは1回だけカタログで解決
    - 従業員をシャードに分割し、シャードごとのカウンタを最後に合算
      （共有する可変状態を持たない）
    - キャンセルはバッチ間でのみ判定し、実行中のバッチは中断しない
    """

    def __init__(
        self,
        resolver: Optional[MatchResolver] = None,
        n_jobs: int = 1,
        shard_size: int = 500,
        batch_size: int = 8,
        backend: str = "threading",
    ):
        """
        Args:
            resolver: マッチング判定器
            n_jobs: 並列ジョブ数（-1で全コア使用）
            shard_size: 1シャードあたりの従業員数
            batch_size: キャンセル判定の間に実行するシャード数
            backend: joblibのバックエンド（threading / sequential）
        """
        if shard_size < 1:
            raise InvalidParameterError("shard_size", shard_size, "must be >= 1")
        if batch_size < 1:
            raise InvalidParameterError("batch_size", batch_size, "must be >= 1")

        self.resolver = resolver or MatchResolver()
        self.n_jobs = n_jobs
        self.shard_size = shard_size
        self.batch_size = batch_size
        self.backend = backend

    @classmethod
    def from_config(cls, config, resolver: Optional[MatchResolver] = None) -> "OrgAggregator":
        """Config.aggregation から生成"""
        params = config.aggregation
        return cls(
            resolver=resolver,
            n_jobs=params.n_jobs,
            shard_size=params.shard_size,
            batch_size=params.batch_size,
            backend=params.backend,
        )

    def aggregate(
        self,
        targets: Sequence[TargetDefinition],
        all_employees_acquired_skills: Mapping[EmployeeId, Sequence[AcquiredSkill]],
        catalog: SkillCatalog,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> Dict[TargetId, OrgTargetSummary]:
        """
        目標ごとの組織集計

        Args:
            targets: 集計対象の目標
            all_employees_acquired_skills: 従業員ID -> 習得スキル
            catalog: スキルカタログ
            cancel_event: セットされると次のバッチを開始しない
            deadline: time.monotonic() 基準の締め切り

        Returns:
            目標ID -> OrgTargetSummary

        Raises:
            InvalidInputError: 必須の入力がNoneの場合
            AggregationCancelledError: バッチ開始前にキャンセル・締め切り超過を検知した場合
        """
        if targets is None:
            raise InvalidInputError("targets", "targets must not be None")
        if all_employees_acquired_skills is None:
            raise InvalidInputError(
                "all_employees_acquired_skills", "employee skill mapping must not be None"
            )
        if catalog is None:
            raise InvalidInputError("catalog", "skill catalog must not be None")

        prepared = self._prepare_targets(targets, catalog)
        employees = list(all_employees_acquired_skills.items())
        shards = self._split_shards(employees)

        self.logger.info(
            "org_aggregation_started",
            targets=len(prepared),
            employees=len(employees),
            shards=len(shards),
            n_jobs=self.n_jobs,
        )

        counts = np.zeros((2, len(prepared)), dtype=np.int64)
        completed_shards = 0
        with Parallel(n_jobs=self.n_jobs, backend=self.backend) as parallel:
            for start in range(0, len(shards), self.batch_size):
                self._check_cancelled(cancel_event, deadline, completed_shards, len(shards))
                batch = shards[start:start + self.batch_size]
                shard_counts = parallel(
                    delayed(self._evaluate_shard)(shard, prepared) for shard in batch
                )
                counts += np.sum(shard_counts, axis=0, dtype=np.int64)
                completed_shards += len(batch)

        summaries = {
            target.target_id: OrgTargetSummary(
                target_id=target.target_id,
                employees_needing_improvement=int(counts[_NEEDING_ROW, i]),
                total_employees=len(employees),
                employees_completed=int(counts[_COMPLETED_ROW, i]),
            )
            for i, target in enumerate(prepared)
        }

        self.logger.info(
            "org_aggregation_completed",
            targets=len(summaries),
            employees=len(employees),
        )
        return summaries

    def _prepare_targets(
        self, targets: Sequence[TargetDefinition], catalog: SkillCatalog
    ) -> List[PreparedTarget]:
        prepared = []
        seen: set = set()
        for target in targets:
            if target.id in seen:
                self.logger.warning("duplicate_target_in_aggregation", target_id=target.id)
                continue
            seen.add(target.id)
            prepared.append(
                self.resolver.prepare_target(
                    target.required_skill_ids, target.target_level, catalog, target.id
                )
            )
        return prepared

    def _split_shards(self, employees: EmployeeShard) -> List[EmployeeShard]:
        return [
            employees[i:i + self.shard_size]
            for i in range(0, len(employees), self.shard_size)
        ]

    def _evaluate_shard(
        self, shard: EmployeeShard, prepared: List[PreparedTarget]
    ) -> np.ndarray:
        """
        シャード内の従業員を評価

        Returns:
            shape (2, 目標数) のカウンタ（0行目: 要改善数、1行目: 達成数）
        """
        counts = np.zeros((2, len(prepared)), dtype=np.int64)
        for employee_id, acquired_skills in shard:
            index = self.resolver.build_skill_index(acquired_skills or [])
            for i, target in enumerate(prepared):
                satisfied = len(MatchResolver.satisfied_ids(index, target))
                if target.total - satisfied > 0:
                    counts[_NEEDING_ROW, i] += 1
                elif target.total > 0:
                    counts[_COMPLETED_ROW, i] += 1
        return counts

    @staticmethod
    def _check_cancelled(
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
        completed_shards: int,
        total_shards: int,
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise AggregationCancelledError(completed_shards, total_shards, reason="cancelled")
        if deadline is not None and time.monotonic() >= deadline:
            raise AggregationCancelledError(completed_shards, total_shards, reason="deadline exceeded")

    @staticmethod
    def to_frame(
        summaries: Mapping[TargetId, OrgTargetSummary],
        targets: Optional[Sequence[TargetDefinition]] = None,
    ) -> pd.DataFrame:
        """
        集計結果をDataFrameに変換

        Returns:
            target_id, target_name, employees_needing_improvement,
            employees_completed, total_employees, completion_rate を持つDataFrame
            （要改善数の多い順）
        """
        names: Dict[Hashable, str] = {}
        if targets is not None:
            names = {target.id: target.display_name for target in targets}

        rows = []
        for summary in summaries.values():
            row = summary.to_dict()
            row["target_name"] = names.get(summary.target_id, f"Target {summary.target_id}")
            rows.append(row)

        columns = [
            "target_id",
            "target_name",
            "employees_needing_improvement",
            "employees_completed",
            "total_employees",
            "completion_rate",
        ]
        df = pd.DataFrame(rows, columns=columns)
        return df.sort_values(
            "employees_needing_improvement", ascending=False, kind="stable"
        ).reset_index(drop=True)
