"""
データモデル定義

カタログ・習得スキル・目標・アクティビティと、
そこから導出されるギャップ分析結果を表す不変データクラス
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Hashable, Optional, Tuple


SkillId = Hashable
TargetId = Hashable
EmployeeId = Hashable


@dataclass(frozen=True)
class SkillDefinition:
    """スキル定義（カタログの参照データ）"""

    id: SkillId
    name: str
    category: Optional[str] = None


@dataclass(frozen=True)
class AcquiredSkill:
    """
    従業員が保有するスキル

    スキル定義とは名前（大文字小文字を区別しない）で突き合わせる。
    同一従業員・同名のレコードが複数あってもよい。
    """

    owner_id: EmployeeId
    name: str
    level: Any
    category: Optional[str] = None
    last_updated: Any = None


class TargetScope(Enum):
    """目標の適用範囲"""

    GLOBAL = "global"
    INDIVIDUAL = "individual"


@dataclass(frozen=True)
class TargetDefinition:
    """スキル目標"""

    id: TargetId
    required_skill_ids: Tuple[SkillId, ...]
    target_level: Any = None
    scope: TargetScope = TargetScope.GLOBAL
    owner_id: Optional[EmployeeId] = None
    name: Optional[str] = None
    description: Optional[str] = None
    target_date: Any = None

    def __post_init__(self):
        # リストで渡されても不変にする
        object.__setattr__(self, "required_skill_ids", tuple(self.required_skill_ids))
        if not isinstance(self.scope, TargetScope):
            object.__setattr__(self, "scope", TargetScope(self.scope))

    @property
    def display_name(self) -> str:
        return self.name or f"Target {self.id}"


@dataclass(frozen=True)
class GapAnalysisResult:
    """
    目標に対するギャップ分析結果

    入力のスナップショットから毎回計算され、永続化されない。
    employees_needing_improvement は組織集計でのみ設定される。
    """

    target_id: Optional[TargetId]
    total_target_skills: int
    acquired_skills: int
    progress_percent: int
    skill_gap: int
    is_completed: bool
    employees_needing_improvement: Optional[int] = None
    satisfied_skill_ids: frozenset = field(default_factory=frozenset)
    target_name: Optional[str] = None
    scope: Optional[TargetScope] = None
    target_level: Any = None
    target_date: Any = None

    def to_dict(self) -> dict[str, Any]:
        """辞書形式で返す"""
        data = asdict(self)
        data["satisfied_skill_ids"] = sorted(self.satisfied_skill_ids, key=str)
        data["scope"] = self.scope.value if self.scope is not None else None
        if isinstance(self.target_level, Enum):
            data["target_level"] = self.target_level.value
        return data


@dataclass(frozen=True)
class OrgTargetSummary:
    """組織全体での目標ごとの集計"""

    target_id: TargetId
    employees_needing_improvement: int
    total_employees: int
    employees_completed: int = 0

    @property
    def completion_rate(self) -> float:
        """目標を達成した従業員の割合（0.0-1.0）"""
        if self.total_employees == 0:
            return 0.0
        return self.employees_completed / self.total_employees

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["completion_rate"] = round(self.completion_rate, 3)
        return data


@dataclass(frozen=True)
class ActivityEvent:
    """スキル変更履歴のイベント"""

    id: Hashable
    owner_id: Optional[EmployeeId]
    timestamp: Any
    skill_id: Optional[SkillId] = None
    previous_level: Any = None
    new_level: Any = None
    note: Optional[str] = None

    @property
    def change_type(self) -> str:
        """既存レベルがあれば "update"、なければ "add" """
        return "update" if self.previous_level else "add"
