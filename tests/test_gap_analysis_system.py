"""
GapAnalysisSystemの統合テスト
"""

import datetime
import logging
import threading

import pytest

from conftest import InMemoryHistoryStore, InMemoryTargetStore
from skillmetrics_gap.core.errors import (
    AggregationCancelledError,
    DataSourceUnavailableError,
    InvalidInputError,
)
from skillmetrics_gap.core.gap_analysis_system import GapAnalysisSystem
from skillmetrics_gap.core.interfaces import (
    HistoryStore,
    SkillCatalogSource,
    SkillStore,
    TargetStore,
)
from skillmetrics_gap.core.logging_config import HANDLER_NAME
from skillmetrics_gap.core.models import TargetDefinition, TargetScope


class UnreachableTargetStore(InMemoryTargetStore):
    """グローバル目標の取得で常に指定の例外を送出する目標ストア"""

    def __init__(self, global_targets, individual_targets, error):
        super().__init__(global_targets, individual_targets)
        self.error = error

    def get_global_targets(self):
        self.global_calls += 1
        raise self.error


@pytest.fixture
def system(catalog_source, skill_store, target_store, history_store, test_config):
    return GapAnalysisSystem(
        catalog_source, skill_store, target_store, history_store, config=test_config
    )


@pytest.mark.integration
class TestEmployeeGapAnalysis:
    """従業員ごとのギャップ分析"""

    def test_global_then_individual(self, system):
        results = system.compute_employee_gap_analysis("e1")
        assert [r.target_id for r in results] == ["T1", "I1"]

        t1, i1 = results
        assert (t1.acquired_skills, t1.total_target_skills, t1.progress_percent) == (1, 3, 33)
        assert t1.skill_gap == 2
        assert t1.scope is TargetScope.GLOBAL
        assert i1.scope is TargetScope.INDIVIDUAL
        assert i1.is_completed is False

    def test_completed_employee(self, system):
        results = system.compute_employee_gap_analysis("e2")
        assert [r.target_id for r in results] == ["T1"]
        assert results[0].is_completed is True
        assert results[0].progress_percent == 100

    def test_unknown_employee_has_no_skills(self, system):
        results = system.compute_employee_gap_analysis("nobody")
        assert results[0].acquired_skills == 0
        assert results[0].skill_gap == 3

    def test_catalog_only_fetches_referenced_ids(self, system, catalog_source):
        system.compute_employee_gap_analysis("e1")
        assert catalog_source.lookups == 4

    @pytest.mark.parametrize("employee_id", ["", " e1", None])
    def test_invalid_employee_id(self, system, employee_id):
        with pytest.raises(InvalidInputError):
            system.compute_employee_gap_analysis(employee_id)

    def test_missing_collaborator(self, skill_store, target_store):
        with pytest.raises(InvalidInputError):
            GapAnalysisSystem(None, skill_store, target_store)

    def test_configure_logging(self, catalog_source, skill_store, target_store, test_config):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        try:
            GapAnalysisSystem(
                catalog_source, skill_store, target_store, config=test_config,
                configure_logging=True,
            )
            assert any(h.get_name() == HANDLER_NAME for h in root.handlers)
        finally:
            root.handlers = handlers
            root.setLevel(level)


@pytest.mark.integration
class TestGlobalTargetRetry:
    """グローバル目標取得のリトライと縮退"""

    def test_transient_failure_is_retried(
        self, catalog_source, skill_store, target_t1, individual_target_e1, test_config
    ):
        store = InMemoryTargetStore([target_t1], [individual_target_e1], failures=1)
        system = GapAnalysisSystem(catalog_source, skill_store, store, config=test_config)

        results = system.compute_employee_gap_analysis("e1")
        assert [r.target_id for r in results] == ["T1", "I1"]
        assert store.global_calls == 2

    def test_persistent_failure_degrades_to_individual(
        self, catalog_source, skill_store, target_t1, individual_target_e1, test_config
    ):
        store = InMemoryTargetStore([target_t1], [individual_target_e1], failures=10)
        system = GapAnalysisSystem(catalog_source, skill_store, store, config=test_config)

        results = system.compute_employee_gap_analysis("e1")
        assert [r.target_id for r in results] == ["I1"]
        assert store.global_calls == test_config.retry.max_attempts

    @pytest.mark.parametrize("error", [ConnectionError("target service down"), TimeoutError()])
    def test_network_error_degrades_to_individual(
        self, catalog_source, skill_store, target_t1, individual_target_e1, test_config, error
    ):
        """OSError系の通信障害もソース利用不可として扱い、リトライ後に縮退する"""
        store = UnreachableTargetStore([target_t1], [individual_target_e1], error)
        system = GapAnalysisSystem(catalog_source, skill_store, store, config=test_config)

        results = system.compute_employee_gap_analysis("e1")
        assert [r.target_id for r in results] == ["I1"]
        assert store.global_calls == test_config.retry.max_attempts

    def test_org_analysis_wraps_network_error(
        self, catalog_source, skill_store, target_t1, test_config
    ):
        store = UnreachableTargetStore([target_t1], [], ConnectionError("refused"))
        system = GapAnalysisSystem(catalog_source, skill_store, store, config=test_config)
        with pytest.raises(DataSourceUnavailableError) as exc_info:
            system.compute_org_gap_analysis()
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_org_analysis_propagates_persistent_failure(
        self, catalog_source, skill_store, target_t1, test_config
    ):
        store = InMemoryTargetStore([target_t1], [], failures=10)
        system = GapAnalysisSystem(catalog_source, skill_store, store, config=test_config)
        with pytest.raises(DataSourceUnavailableError):
            system.compute_org_gap_analysis()


@pytest.mark.integration
class TestOrgGapAnalysis:
    """組織集計"""

    def test_global_targets_by_default(self, system):
        summaries = system.compute_org_gap_analysis()
        assert summaries["T1"].employees_needing_improvement == 2
        assert summaries["T1"].total_employees == 3

    def test_joinable_with_employee_results(self, system):
        summaries = system.compute_org_gap_analysis()
        results = system.compute_employee_gap_analysis("e1")
        assert results[0].target_id in summaries

    def test_explicit_targets(self, system):
        react = TargetDefinition(id="R", required_skill_ids=[4])
        summaries = system.compute_org_gap_analysis(targets=[react])
        assert summaries["R"].employees_needing_improvement == 3

    def test_cancellation(self, system):
        event = threading.Event()
        event.set()
        with pytest.raises(AggregationCancelledError):
            system.compute_org_gap_analysis(cancel_event=event)


@pytest.mark.integration
class TestRecentActivity:
    """最近のアクティビティ"""

    def test_merge(self, system):
        result = system.merge_recent_activity("e1")
        assert [e.id for e in result] == [2, 1, 3, 4]

    def test_limit(self, system):
        assert [e.id for e in system.merge_recent_activity("e1", limit=2)] == [2, 1]

    @pytest.mark.parametrize("limit", [-1, 101])
    def test_invalid_limit(self, system, limit):
        with pytest.raises(InvalidInputError):
            system.merge_recent_activity("e1", limit=limit)

    def test_requires_history_store(self, catalog_source, skill_store, target_store, test_config):
        system = GapAnalysisSystem(catalog_source, skill_store, target_store, config=test_config)
        with pytest.raises(InvalidInputError):
            system.merge_recent_activity("e1")

    def test_empty_history(self, catalog_source, skill_store, target_store, test_config):
        system = GapAnalysisSystem(
            catalog_source, skill_store, target_store, InMemoryHistoryStore([]), config=test_config
        )
        assert system.merge_recent_activity("e1") == []


@pytest.mark.integration
class TestSupplementaryViews:
    """期限切れ目標・スキル概要"""

    def test_overdue_targets(self, system):
        overdue = system.get_overdue_targets("e1", today=datetime.date(2024, 1, 1))
        assert [t.id for t in overdue] == ["I1"]

    def test_not_overdue_before_due_date(self, system):
        assert system.get_overdue_targets("e1", today=datetime.date(2020, 1, 31)) == []

    def test_skill_overview(self, system):
        overview = system.get_skill_overview("e1")
        distribution = overview["level_distribution"]
        assert distribution["total"] == 2
        assert distribution["counts"]["expert"] == 1
        assert distribution["counts"]["beginner"] == 1
        assert distribution["percentages"]["expert"] == 50
        assert [s.name for s in overview["top_skills"]] == ["python", "sql"]


class TestCollaboratorProtocols:
    """インメモリ実装がプロトコルを満たすこと"""

    def test_protocols(self, catalog_source, skill_store, target_store, history_store):
        assert isinstance(catalog_source, SkillCatalogSource)
        assert isinstance(skill_store, SkillStore)
        assert isinstance(target_store, TargetStore)
        assert isinstance(history_store, HistoryStore)
        assert not isinstance(object(), TargetStore)
