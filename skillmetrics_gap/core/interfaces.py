"""
インターフェース定義

外部コラボレーター（カタログ、スキルストア、目標ストア、履歴ストア）を
Protocol（構造的部分型）で定義する。永続化の実装はこのパッケージの範囲外。
"""

from typing import Mapping, Optional, Protocol, Sequence, runtime_checkable

from skillmetrics_gap.core.models import (
    AcquiredSkill,
    ActivityEvent,
    EmployeeId,
    SkillDefinition,
    SkillId,
    TargetDefinition,
)


@runtime_checkable
class SkillCatalogSource(Protocol):
    """スキルカタログの参照"""

    def get_skill_definition(self, skill_id: SkillId) -> Optional[SkillDefinition]:
        """スキル定義を取得（存在しない場合はNone）"""
        ...


@runtime_checkable
class SkillStore(Protocol):
    """従業員の習得スキルストア"""

    def get_acquired_skills(self, employee_id: EmployeeId) -> Sequence[AcquiredSkill]:
        """従業員の習得スキル一覧"""
        ...

    def get_all_acquired_skills(self) -> Mapping[EmployeeId, Sequence[AcquiredSkill]]:
        """全従業員の習得スキル（組織集計用）"""
        ...


@runtime_checkable
class TargetStore(Protocol):
    """
    スキル目標ストア

    get_global_targets は上流障害時に DataSourceUnavailableError または
    OSError（ConnectionError, TimeoutError など）を送出してよい
    """

    def get_global_targets(self) -> Sequence[TargetDefinition]:
        ...

    def get_individual_targets(self, employee_id: EmployeeId) -> Sequence[TargetDefinition]:
        ...


@runtime_checkable
class HistoryStore(Protocol):
    """スキル変更履歴ストア"""

    def get_personal_history(self, employee_id: EmployeeId) -> Sequence[ActivityEvent]:
        ...

    def get_org_history(self) -> Sequence[ActivityEvent]:
        ...
