"""
スキル目標マッチング

従業員1人 × 目標1件について、どの必須スキルが充足されているかを判定する
"""

from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, Optional, Set, Tuple

from skillmetrics_gap.core.catalog import SkillCatalog
from skillmetrics_gap.core.errors import InvalidInputError
from skillmetrics_gap.core.levels import ordinal
from skillmetrics_gap.core.logging_config import LoggerMixin
from skillmetrics_gap.core.models import AcquiredSkill, SkillId
from skillmetrics_gap.utils.data_normalizers import normalize_skill_name


# 正規化スキル名 -> 保有レコード中の最大序数
SkillIndex = Dict[str, int]


@dataclass(frozen=True)
class PreparedTarget:
    """カタログ解決済みの目標"""

    target_id: Optional[Hashable]
    resolved_skill_ids: Tuple[SkillId, ...]
    normalized_names: Tuple[str, ...]
    required_ordinal: Optional[int]

    @property
    def total(self) -> int:
        return len(self.resolved_skill_ids)


class MatchResolver(LoggerMixin):
    """
    必須スキルの充足判定

    判定ルール（必須スキルIDごと）:
    1. カタログに存在しないIDはスキップ（充足にも分母にも含めない）
    2. カタログ上の名前と習得スキル名を大文字小文字を区別せずに比較
    3. 名前が一致するレコードのいずれかが目標レベル以上なら充足
       （目標レベル未設定の場合は名前一致のみで充足）

    レベルが未知のレコード、および未知の目標レベルは決して充足しない。
    """

    def __init__(self, warn_on_dangling_reference: bool = True, warn_on_unknown_level: bool = True):
        self.warn_on_dangling_reference = warn_on_dangling_reference
        self.warn_on_unknown_level = warn_on_unknown_level

    def build_skill_index(self, acquired_skills: Iterable[AcquiredSkill]) -> SkillIndex:
        """
        習得スキルを正規化名でインデックス化

        同名レコードが複数ある場合は最も高いレベルを保持する。
        レベルが未知のレコードと、名前が空のレコードは除外する。

        Args:
            acquired_skills: 1人の従業員の習得スキル

        Returns:
            正規化スキル名 -> 最大序数
        """
        if acquired_skills is None:
            raise InvalidInputError("acquired_skills", "acquired skills must not be None")

        index: SkillIndex = {}
        for skill in acquired_skills:
            level_ordinal = ordinal(skill.level)
            if level_ordinal is None:
                if self.warn_on_unknown_level:
                    self.logger.warning(
                        "unknown_proficiency_level",
                        owner_id=skill.owner_id,
                        skill_name=skill.name,
                        level=skill.level,
                    )
                continue
            key = normalize_skill_name(skill.name)
            if not key:
                continue
            if level_ordinal > index.get(key, 0):
                index[key] = level_ordinal
        return index

    def resolve(
        self,
        acquired_skills: Iterable[AcquiredSkill],
        required_skill_ids: Iterable[SkillId],
        target_level: Any,
        catalog: SkillCatalog,
        target_id: Optional[Hashable] = None,
    ) -> Set[SkillId]:
        """
        充足された必須スキルIDを返す

        Args:
            acquired_skills: 従業員の習得スキル
            required_skill_ids: 目標の必須スキルID
            target_level: 目標レベル（Noneの場合はレベル不問）
            catalog: スキルカタログ
            target_id: ログ用の目標ID

        Returns:
            required_skill_ids のうち充足されたIDの集合

        Raises:
            InvalidInputError: catalog / acquired_skills / required_skill_ids が None の場合
        """
        if catalog is None:
            raise InvalidInputError("catalog", "skill catalog must not be None")
        index = self.build_skill_index(acquired_skills)
        return self.resolve_indexed(index, required_skill_ids, target_level, catalog, target_id)

    def resolve_indexed(
        self,
        index: SkillIndex,
        required_skill_ids: Iterable[SkillId],
        target_level: Any,
        catalog: SkillCatalog,
        target_id: Optional[Hashable] = None,
    ) -> Set[SkillId]:
        """build_skill_index 済みのインデックスを使って充足判定"""
        if catalog is None:
            raise InvalidInputError("catalog", "skill catalog must not be None")
        if required_skill_ids is None:
            raise InvalidInputError("required_skill_ids", "required skill ids must not be None")

        prepared = self.prepare_target(required_skill_ids, target_level, catalog, target_id)
        return self.satisfied_ids(index, prepared)

    def prepare_target(
        self,
        required_skill_ids: Iterable[SkillId],
        target_level: Any,
        catalog: SkillCatalog,
        target_id: Optional[Hashable] = None,
    ) -> PreparedTarget:
        """
        目標の必須スキルをカタログで解決し、照合用の形に変換

        組織集計では目標ごとに一度だけ呼び出し、全従業員で使い回す
        """
        resolved_ids = catalog.resolve_ids(
            required_skill_ids, target_id=target_id, warn=self.warn_on_dangling_reference
        )
        return PreparedTarget(
            target_id=target_id,
            resolved_skill_ids=tuple(resolved_ids),
            normalized_names=tuple(catalog.normalized_name(skill_id) for skill_id in resolved_ids),
            required_ordinal=self.required_ordinal(target_level, target_id),
        )

    @staticmethod
    def satisfied_ids(index: SkillIndex, prepared: PreparedTarget) -> Set[SkillId]:
        """インデックスと解決済み目標から充足IDを求める（O(必須スキル数)）"""
        if prepared.required_ordinal is None:
            return set()
        return {
            skill_id
            for skill_id, name in zip(prepared.resolved_skill_ids, prepared.normalized_names)
            if index.get(name, 0) >= prepared.required_ordinal
        }

    def required_ordinal(self, target_level: Any, target_id: Optional[Hashable] = None) -> Optional[int]:
        """
        目標レベルの序数

        未設定なら1（名前一致のみで充足）、未知の値ならNone（充足不可）
        """
        if target_level is None:
            return 1
        required = ordinal(target_level)
        if required is None and self.warn_on_unknown_level:
            self.logger.warning(
                "unknown_target_level", target_id=target_id, target_level=target_level
            )
        return required
