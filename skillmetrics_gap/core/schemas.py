"""
入力バリデーションスキーマ

Pydanticを使用した型安全な入力検証。
上流ストアのレコード（snake_case / camelCase どちらも可）をドメインモデルへ変換する。
"""

from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from skillmetrics_gap.core.models import (
    AcquiredSkill,
    ActivityEvent,
    SkillDefinition,
    TargetDefinition,
    TargetScope,
)


# =============================================================================
# 型エイリアス
# =============================================================================

Identifier = int | str
ScopeName = Literal["global", "individual"]


def _strip_name(v: str) -> str:
    stripped = v.strip()
    if not stripped:
        raise ValueError('Name cannot be blank')
    return stripped


# =============================================================================
# レコードスキーマ
# =============================================================================

class SkillDefinitionRecord(BaseModel):
    """スキル定義レコード"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Identifier
    name: str = Field(..., min_length=1, max_length=200)
    category: str | None = Field(None, max_length=200)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_name(v)

    def to_model(self) -> SkillDefinition:
        return SkillDefinition(id=self.id, name=self.name, category=self.category)


class AcquiredSkillRecord(BaseModel):
    """
    習得スキルレコード

    level は検証しない（未知のレベルはマッチング時に「充足不可」として扱う）
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    owner_id: Identifier = Field(..., validation_alias=AliasChoices('owner_id', 'userId', 'user_id'))
    name: str = Field(..., min_length=1, max_length=200)
    level: Any = None
    category: str | None = None
    last_updated: Any = Field(None, validation_alias=AliasChoices('last_updated', 'lastUpdated'))

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_name(v)

    def to_model(self) -> AcquiredSkill:
        return AcquiredSkill(
            owner_id=self.owner_id,
            name=self.name,
            level=self.level,
            category=self.category,
            last_updated=self.last_updated,
        )


class TargetRecord(BaseModel):
    """スキル目標レコード"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Identifier
    required_skill_ids: list[Identifier] = Field(
        default_factory=list,
        validation_alias=AliasChoices('required_skill_ids', 'requiredSkillIds', 'skillIds'),
    )
    target_level: str | None = Field(
        None, validation_alias=AliasChoices('target_level', 'targetLevel')
    )
    scope: ScopeName = "global"
    owner_id: Identifier | None = Field(
        None, validation_alias=AliasChoices('owner_id', 'ownerId', 'userId')
    )
    name: str | None = Field(None, max_length=200)
    description: str | None = None
    target_date: Any = Field(
        None, validation_alias=AliasChoices('target_date', 'targetDate', 'dueDate')
    )

    @field_validator('required_skill_ids', mode='before')
    @classmethod
    def split_skill_ids(cls, v: Any) -> Any:
        """カンマ区切り文字列（CSV由来）をリストに変換（数字のみのIDは整数）"""
        if v is None:
            return []
        if isinstance(v, str):
            parts = [part.strip() for part in v.split(',') if part.strip()]
            return [int(part) if part.isdigit() else part for part in parts]
        return v

    @model_validator(mode='after')
    def validate_owner(self) -> "TargetRecord":
        """個人目標には所有者が必須"""
        if self.scope == "individual" and self.owner_id is None:
            raise ValueError('Individual targets require owner_id')
        return self

    def to_model(self) -> TargetDefinition:
        return TargetDefinition(
            id=self.id,
            required_skill_ids=tuple(self.required_skill_ids),
            target_level=self.target_level,
            scope=TargetScope(self.scope),
            owner_id=self.owner_id,
            name=self.name,
            description=self.description,
            target_date=self.target_date,
        )


class ActivityRecord(BaseModel):
    """スキル変更履歴レコード"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Identifier
    owner_id: Identifier | None = Field(
        None, validation_alias=AliasChoices('owner_id', 'userId', 'user_id')
    )
    timestamp: Any = Field(
        None, validation_alias=AliasChoices('timestamp', 'createdAt', 'created_at')
    )
    skill_id: Identifier | None = Field(
        None, validation_alias=AliasChoices('skill_id', 'skillId')
    )
    previous_level: str | None = Field(
        None, validation_alias=AliasChoices('previous_level', 'previousLevel')
    )
    new_level: str | None = Field(
        None, validation_alias=AliasChoices('new_level', 'newLevel')
    )
    note: str | None = None

    def to_model(self) -> ActivityEvent:
        return ActivityEvent(
            id=self.id,
            owner_id=self.owner_id,
            timestamp=self.timestamp,
            skill_id=self.skill_id,
            previous_level=self.previous_level,
            new_level=self.new_level,
            note=self.note,
        )


# =============================================================================
# リクエストスキーマ
# =============================================================================

class EmployeeGapRequest(BaseModel):
    """従業員ギャップ分析リクエスト"""
    model_config = ConfigDict(frozen=True)

    employee_id: Identifier

    @field_validator('employee_id')
    @classmethod
    def validate_employee_id(cls, v: Identifier) -> Identifier:
        if isinstance(v, str) and (not v or v.strip() != v):
            raise ValueError('Employee id cannot be blank or have leading/trailing whitespace')
        return v


class RecentActivityRequest(EmployeeGapRequest):
    """最近のアクティビティ取得リクエスト"""

    limit: int | None = Field(
        None,
        ge=0,
        le=100,
        description="最大件数（Noneの場合は設定値）"
    )


# =============================================================================
# Data Quality関連スキーマ
# =============================================================================

class DataQualityReport(BaseModel):
    """データ品質レポート"""
    model_config = ConfigDict(frozen=False)  # レポートは可変

    is_valid: bool = Field(True, description="データが有効か")
    errors: list[str] = Field(default_factory=list, description="エラーリスト")
    warnings: list[str] = Field(default_factory=list, description="警告リスト")
    statistics: dict[str, float] = Field(default_factory=dict, description="統計情報")

    def add_error(self, message: str) -> None:
        """エラーを追加"""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """警告を追加"""
        self.warnings.append(message)

    def set_statistic(self, key: str, value: float) -> None:
        """統計情報を設定"""
        self.statistics[key] = value
