"""
データローダー

pandas DataFrame（CSVやDBから取得したスナップショット）を検証し、
カタログ・習得スキル・目標・履歴のドメインモデルへ変換する。
不正な行はスキップし、DataQualityReport に記録する。
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Type

import pandas as pd
from pydantic import BaseModel, ValidationError

from skillmetrics_gap.core.catalog import SkillCatalog
from skillmetrics_gap.core.errors import InvalidInputError
from skillmetrics_gap.core.models import (
    AcquiredSkill,
    ActivityEvent,
    EmployeeId,
    TargetDefinition,
)
from skillmetrics_gap.core.schemas import (
    AcquiredSkillRecord,
    ActivityRecord,
    DataQualityReport,
    SkillDefinitionRecord,
    TargetRecord,
)


logger = logging.getLogger(__name__)


class DataLoader:
    """データ読み込みクラス"""

    def __init__(self):
        self.report = DataQualityReport()

    @staticmethod
    def _records(df: pd.DataFrame, name: str) -> List[Dict[str, Any]]:
        """DataFrameを辞書のリストに変換（欠損値はNone）"""
        if df is None:
            raise InvalidInputError(name, "frame must not be None")
        cleaned = df.astype(object).where(df.notna(), None)
        return cleaned.to_dict(orient="records")

    def _validate(
        self, df: pd.DataFrame, name: str, schema: Type[BaseModel]
    ) -> List[Any]:
        """
        各行をスキーマで検証してドメインモデルに変換

        Args:
            df: 入力DataFrame
            name: データ種別名（レポート用）
            schema: 行を検証するPydanticモデル

        Returns:
            ドメインモデルのリスト
        """
        models = []
        skipped = 0
        for row_number, record in enumerate(self._records(df, name)):
            try:
                models.append(schema.model_validate(record).to_model())
            except ValidationError as e:
                skipped += 1
                self.report.add_warning(
                    f"{name}: row {row_number} skipped ({e.error_count()} validation errors)"
                )

        self.report.set_statistic(f"{name}_rows", float(len(df)))
        self.report.set_statistic(f"{name}_skipped", float(skipped))
        if skipped:
            logger.warning(f"{name}: {skipped}/{len(df)}行を検証エラーでスキップしました")
        else:
            logger.info(f"{name}: {len(models)}行を読み込みました")
        return models

    def load_catalog(self, df: pd.DataFrame) -> SkillCatalog:
        """
        スキルカタログを読み込む

        Args:
            df: id, name, category カラムを持つDataFrame

        Returns:
            SkillCatalog
        """
        return SkillCatalog(self._validate(df, "skills", SkillDefinitionRecord))

    def load_acquired_skills(self, df: pd.DataFrame) -> Dict[EmployeeId, List[AcquiredSkill]]:
        """
        習得スキルを従業員ごとにまとめて読み込む

        Args:
            df: owner_id, name, level, category, last_updated カラムを持つDataFrame

        Returns:
            従業員ID -> 習得スキルのリスト
        """
        grouped: Dict[EmployeeId, List[AcquiredSkill]] = defaultdict(list)
        for skill in self._validate(df, "acquired_skills", AcquiredSkillRecord):
            grouped[skill.owner_id].append(skill)
        return dict(grouped)

    def load_targets(self, df: pd.DataFrame) -> List[TargetDefinition]:
        """
        スキル目標を読み込む

        required_skill_ids はリストまたはカンマ区切り文字列
        """
        return self._validate(df, "targets", TargetRecord)

    def load_events(self, df: pd.DataFrame) -> List[ActivityEvent]:
        """スキル変更履歴を読み込む"""
        return self._validate(df, "events", ActivityRecord)
