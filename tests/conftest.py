"""
共通テストフィクスチャ

全テストで共有するフィクスチャとインメモリのコラボレーターを定義
"""

import pytest

from skillmetrics_gap.core.catalog import SkillCatalog
from skillmetrics_gap.core.config import Config, RetryParams
from skillmetrics_gap.core.errors import DataSourceUnavailableError
from skillmetrics_gap.core.models import (
    AcquiredSkill,
    ActivityEvent,
    SkillDefinition,
    TargetDefinition,
    TargetScope,
)


# ==================== テストデータフィクスチャ ====================


@pytest.fixture
def skill_definitions():
    """サンプルスキル定義"""
    return [
        SkillDefinition(id=1, name="Python", category="Programming"),
        SkillDefinition(id=2, name="SQL", category="Database"),
        SkillDefinition(id=3, name="Docker", category="DevOps"),
        SkillDefinition(id=4, name="React.js", category="Programming"),
    ]


@pytest.fixture
def catalog(skill_definitions):
    """サンプルスキルカタログ"""
    return SkillCatalog(skill_definitions)


@pytest.fixture
def target_t1():
    """Python / SQL / Docker を intermediate 以上で要求する目標"""
    return TargetDefinition(
        id="T1",
        required_skill_ids=[1, 2, 3],
        target_level="intermediate",
        name="Backend basics",
    )


@pytest.fixture
def employee_skills():
    """Pythonはexpert、SQLはbeginnerの従業員"""
    return [
        AcquiredSkill(owner_id="e1", name="python", level="expert"),
        AcquiredSkill(owner_id="e1", name="sql", level="beginner"),
    ]


@pytest.fixture
def population():
    """従業員ID -> 習得スキル"""
    return {
        "e1": [
            AcquiredSkill(owner_id="e1", name="python", level="expert"),
            AcquiredSkill(owner_id="e1", name="sql", level="beginner"),
        ],
        "e2": [
            AcquiredSkill(owner_id="e2", name="Python", level="intermediate"),
            AcquiredSkill(owner_id="e2", name="SQL", level="expert"),
            AcquiredSkill(owner_id="e2", name="docker", level="intermediate"),
        ],
        "e3": [],
    }


@pytest.fixture
def test_config():
    """リトライ待機なしの設定"""
    return Config(retry=RetryParams(max_attempts=2, min_wait_seconds=0, max_wait_seconds=0))


# ==================== インメモリのコラボレーター ====================


class InMemoryCatalogSource:
    def __init__(self, definitions):
        self.definitions = {d.id: d for d in definitions}
        self.lookups = 0

    def get_skill_definition(self, skill_id):
        self.lookups += 1
        return self.definitions.get(skill_id)


class InMemorySkillStore:
    def __init__(self, skills_by_employee):
        self.skills_by_employee = skills_by_employee

    def get_acquired_skills(self, employee_id):
        return list(self.skills_by_employee.get(employee_id, []))

    def get_all_acquired_skills(self):
        return dict(self.skills_by_employee)


class InMemoryTargetStore:
    """failures 回だけグローバル目標の取得に失敗する目標ストア"""

    def __init__(self, global_targets, individual_targets, failures=0):
        self.global_targets = global_targets
        self.individual_targets = individual_targets
        self.failures = failures
        self.global_calls = 0

    def get_global_targets(self):
        self.global_calls += 1
        if self.global_calls <= self.failures:
            raise DataSourceUnavailableError("targets", "connection refused")
        return list(self.global_targets)

    def get_individual_targets(self, employee_id):
        return [t for t in self.individual_targets if t.owner_id == employee_id]


class InMemoryHistoryStore:
    def __init__(self, events):
        self.events = events

    def get_personal_history(self, employee_id):
        return [e for e in self.events if e.owner_id == employee_id]

    def get_org_history(self):
        return list(self.events)


@pytest.fixture
def catalog_source(skill_definitions):
    return InMemoryCatalogSource(skill_definitions)


@pytest.fixture
def skill_store(population):
    return InMemorySkillStore(population)


@pytest.fixture
def individual_target_e1():
    """e1 の個人目標（React.js、レベル不問）"""
    return TargetDefinition(
        id="I1",
        required_skill_ids=[4],
        scope=TargetScope.INDIVIDUAL,
        owner_id="e1",
        target_date="2020-01-31",
    )


@pytest.fixture
def target_store(target_t1, individual_target_e1):
    return InMemoryTargetStore([target_t1], [individual_target_e1])


@pytest.fixture
def history_store():
    return InMemoryHistoryStore(
        [
            ActivityEvent(id=1, owner_id="e1", timestamp="2024-03-01T10:00:00Z", skill_id=1),
            ActivityEvent(id=2, owner_id="e2", timestamp="2024-03-05T10:00:00Z", skill_id=2),
            ActivityEvent(id=3, owner_id="e1", timestamp="2024-01-10", skill_id=2,
                          previous_level="beginner", new_level="intermediate"),
            ActivityEvent(id=4, owner_id="e3", timestamp="not a date", skill_id=3),
        ]
    )


# ==================== マーカー ====================


def pytest_configure(config):
    """カスタムマーカーを登録"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
