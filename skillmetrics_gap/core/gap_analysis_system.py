"""
ギャップ分析システム

外部コラボレーター（カタログ・スキル・目標・履歴ストア）から
リクエストごとにスナップショットを取得し、各コンポーネントで計算する
ファサードインターフェースを提供
"""

import datetime
import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from skillmetrics_gap.activity.activity_merger import ActivityMerger
from skillmetrics_gap.core.catalog import SkillCatalog
from skillmetrics_gap.core.config import Config
from skillmetrics_gap.core.errors import DataSourceUnavailableError, InvalidInputError
from skillmetrics_gap.core.interfaces import (
    HistoryStore,
    SkillCatalogSource,
    SkillStore,
    TargetStore,
)
from skillmetrics_gap.core.logging_config import LoggerMixin, setup_from_config
from skillmetrics_gap.core.models import (
    ActivityEvent,
    EmployeeId,
    GapAnalysisResult,
    OrgTargetSummary,
    TargetDefinition,
    TargetId,
)
from skillmetrics_gap.core.retry import with_retry_from_config
from skillmetrics_gap.core.schemas import EmployeeGapRequest, RecentActivityRequest
from skillmetrics_gap.matching.match_resolver import MatchResolver
from skillmetrics_gap.organizational.org_aggregator import OrgAggregator
from skillmetrics_gap.organizational.org_metrics import (
    calculate_level_distribution,
    find_overdue_targets,
    rank_top_skills,
)
from skillmetrics_gap.organizational.target_merger import TargetMerger


class GapAnalysisSystem(LoggerMixin):
    """ギャップ分析システムクラス（ファサード）"""

    def __init__(
        self,
        catalog_source: SkillCatalogSource,
        skill_store: SkillStore,
        target_store: TargetStore,
        history_store: Optional[HistoryStore] = None,
        config: Optional[Config] = None,
        configure_logging: bool = False,
    ):
        """
        初期化

        Args:
            catalog_source: スキル定義の参照
            skill_store: 習得スキルストア
            target_store: 目標ストア
            history_store: 履歴ストア（アクティビティ統合を使う場合に必要）
            config: 設定（Noneの場合はデフォルト）
            configure_logging: Trueの場合、config.logging でロギングをセットアップ
        """
        for name, value in (
            ("catalog_source", catalog_source),
            ("skill_store", skill_store),
            ("target_store", target_store),
        ):
            if value is None:
                raise InvalidInputError(name, "collaborator must not be None")

        self.catalog_source = catalog_source
        self.skill_store = skill_store
        self.target_store = target_store
        self.history_store = history_store
        self.config = config or Config.default()
        if configure_logging:
            setup_from_config(self.config)

        resolver = MatchResolver(
            warn_on_dangling_reference=self.config.matching.warn_on_dangling_reference,
            warn_on_unknown_level=self.config.matching.warn_on_unknown_level,
        )
        self.merger = TargetMerger(resolver=resolver)
        self.aggregator = OrgAggregator.from_config(self.config, resolver=resolver)
        self.activity_merger = ActivityMerger(default_limit=self.config.activity.default_limit)
        self._fetch_global_targets_with_retry = with_retry_from_config(self.config)(
            self._fetch_global_targets
        )

    # ---- スナップショット取得 ---- #

    def _fetch_global_targets(self) -> List[TargetDefinition]:
        """グローバル目標を取得（通信障害は DataSourceUnavailableError に変換）"""
        try:
            return list(self.target_store.get_global_targets())
        except OSError as e:
            raise DataSourceUnavailableError("global_targets", str(e) or type(e).__name__) from e

    def _load_global_targets(self) -> Optional[List[TargetDefinition]]:
        """グローバル目標を取得（リトライ後も利用できない場合はNone）"""
        try:
            return self._fetch_global_targets_with_retry()
        except DataSourceUnavailableError as e:
            self.logger.warning("global_targets_unavailable", error=e.to_dict())
            return None

    def _build_catalog(self, targets: Iterable[TargetDefinition]) -> SkillCatalog:
        """目標が参照するスキルIDだけをカタログから取得"""
        skill_ids = [skill_id for target in targets for skill_id in target.required_skill_ids]
        catalog = SkillCatalog.from_lookup(self.catalog_source.get_skill_definition, skill_ids)
        if catalog.missing_ids:
            self.logger.info("catalog_missing_ids", count=len(catalog.missing_ids))
        return catalog

    @staticmethod
    def _validate_employee(employee_id: EmployeeId) -> EmployeeId:
        try:
            return EmployeeGapRequest(employee_id=employee_id).employee_id
        except ValidationError as e:
            raise InvalidInputError("employee_id", str(e)) from e

    def _employee_view(
        self, employee_id: EmployeeId
    ) -> Tuple[List[TargetDefinition], List[GapAnalysisResult]]:
        employee_id = self._validate_employee(employee_id)

        individual = list(self.target_store.get_individual_targets(employee_id))
        globals_ = self._load_global_targets()
        acquired = self.skill_store.get_acquired_skills(employee_id)
        targets = (globals_ or []) + individual
        catalog = self._build_catalog(targets)

        results = self.merger.merge(globals_, individual, acquired, catalog, employee_id)
        return targets, results

    # ---- 公開API ---- #

    def compute_employee_gap_analysis(self, employee_id: EmployeeId) -> List[GapAnalysisResult]:
        """
        従業員の目標ごとのギャップ分析

        グローバル目標のソースが利用できない場合は個人目標のみの結果を返す

        Args:
            employee_id: 従業員ID

        Returns:
            目標ごとの GapAnalysisResult
        """
        _, results = self._employee_view(employee_id)
        return results

    def compute_org_gap_analysis(
        self,
        targets: Optional[Sequence[TargetDefinition]] = None,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> Dict[TargetId, OrgTargetSummary]:
        """
        組織全体のギャップ集計

        Args:
            targets: 集計対象の目標（Noneの場合はグローバル目標）
            cancel_event: キャンセル用イベント
            deadline: time.monotonic() 基準の締め切り

        Returns:
            目標ID -> OrgTargetSummary（目標IDで従業員ごとの結果と結合可能）

        Raises:
            DataSourceUnavailableError: targets 未指定でグローバル目標を取得できない場合
        """
        if targets is None:
            targets = self._fetch_global_targets_with_retry()
        targets = list(targets)
        all_skills = self.skill_store.get_all_acquired_skills()
        catalog = self._build_catalog(targets)
        return self.aggregator.aggregate(
            targets, all_skills, catalog, cancel_event=cancel_event, deadline=deadline
        )

    def merge_recent_activity(
        self, employee_id: EmployeeId, limit: Optional[int] = None
    ) -> List[ActivityEvent]:
        """
        個人と組織の最近のアクティビティを統合

        Args:
            employee_id: 従業員ID
            limit: 最大件数（Noneの場合は設定値、上限100）

        Returns:
            新しい順のイベント
        """
        if self.history_store is None:
            raise InvalidInputError("history_store", "history store is not configured")
        try:
            request = RecentActivityRequest(employee_id=employee_id, limit=limit)
        except ValidationError as e:
            raise InvalidInputError("limit", str(e)) from e

        personal = self.history_store.get_personal_history(request.employee_id)
        org = self.history_store.get_org_history()
        return self.activity_merger.merge(personal, org, request.employee_id, request.limit)

    def get_overdue_targets(
        self, employee_id: EmployeeId, today: Optional[datetime.date] = None
    ) -> List[TargetDefinition]:
        """期限切れで未達成の目標"""
        targets, results = self._employee_view(employee_id)
        seen: set = set()
        unique_targets = []
        for target in targets:
            if target.id not in seen:
                seen.add(target.id)
                unique_targets.append(target)
        return find_overdue_targets(unique_targets, results, today=today)

    def get_skill_overview(self, employee_id: EmployeeId, top_n: int = 3) -> Dict[str, Any]:
        """
        従業員のスキル概要

        Returns:
            level_distribution（レベル分布）と top_skills（上位スキル）
        """
        employee_id = self._validate_employee(employee_id)
        acquired = list(self.skill_store.get_acquired_skills(employee_id))
        return {
            "level_distribution": calculate_level_distribution(acquired),
            "top_skills": rank_top_skills(acquired, n=top_n),
        }
