"""
スキルカタログ

スキルID -> スキル定義 の読み取り専用マッピング。
リクエストごとに一度だけ構築し、マッチング・集計の間で共有する。
"""

from typing import Callable, Dict, Hashable, Iterable, List, Optional

import pandas as pd

from skillmetrics_gap.core.errors import InvalidInputError
from skillmetrics_gap.core.logging_config import LoggerMixin
from skillmetrics_gap.core.models import SkillDefinition, SkillId
from skillmetrics_gap.utils.data_normalizers import normalize_skill_name


class SkillCatalog(LoggerMixin):
    """スキル定義のカタログ"""

    def __init__(self, definitions: Iterable[SkillDefinition]):
        """
        Args:
            definitions: スキル定義（IDが重複する場合は後勝ち）

        Raises:
            InvalidInputError: definitions が None の場合
        """
        if definitions is None:
            raise InvalidInputError("definitions", "skill catalog definitions must not be None")

        self._definitions: Dict[SkillId, SkillDefinition] = {}
        for definition in definitions:
            self._definitions[definition.id] = definition
        self._normalized_names: Dict[SkillId, str] = {
            skill_id: normalize_skill_name(definition.name)
            for skill_id, definition in self._definitions.items()
        }
        self.missing_ids: set = set()

    @classmethod
    def from_lookup(
        cls,
        get_skill_definition: Callable[[SkillId], Optional[SkillDefinition]],
        skill_ids: Iterable[SkillId],
    ) -> "SkillCatalog":
        """
        ID単位の参照関数からカタログを構築

        見つからなかったIDは missing_ids に記録される（例外にはしない）
        """
        definitions = []
        missing = set()
        for skill_id in dict.fromkeys(skill_ids):
            definition = get_skill_definition(skill_id)
            if definition is None:
                missing.add(skill_id)
            else:
                definitions.append(definition)
        catalog = cls(definitions)
        catalog.missing_ids = missing
        return catalog

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "SkillCatalog":
        """
        DataFrameからカタログを構築

        Args:
            df: id, name, category（任意）カラムを持つDataFrame
        """
        if df is None:
            raise InvalidInputError("df", "skill catalog frame must not be None")
        has_category = "category" in df.columns
        definitions = [
            SkillDefinition(
                id=row["id"],
                name=row["name"],
                category=row["category"] if has_category and pd.notna(row["category"]) else None,
            )
            for _, row in df.iterrows()
        ]
        return cls(definitions)

    def __contains__(self, skill_id: object) -> bool:
        try:
            return skill_id in self._definitions
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions.values())

    def get(self, skill_id: SkillId) -> Optional[SkillDefinition]:
        """スキル定義を取得（存在しない場合はNone）"""
        if skill_id not in self:
            return None
        return self._definitions[skill_id]

    def normalized_name(self, skill_id: SkillId) -> Optional[str]:
        """正規化済みのスキル名を取得"""
        if skill_id not in self:
            return None
        return self._normalized_names[skill_id]

    def resolve_ids(
        self,
        skill_ids: Iterable[SkillId],
        target_id: Optional[Hashable] = None,
        warn: bool = True,
    ) -> List[SkillId]:
        """
        カタログに存在するIDだけを順序を保って返す（重複は除去）

        存在しないIDはデータ品質の問題として警告ログを出す
        """
        resolved = []
        for skill_id in dict.fromkeys(skill_ids):
            if skill_id in self:
                resolved.append(skill_id)
            elif warn:
                self.logger.warning(
                    "dangling_skill_reference", skill_id=skill_id, target_id=target_id
                )
        return resolved
