"""
アクティビティ統合

個人と組織のスキル変更履歴を統合し、新しい順に並べて上位を返す
"""

from typing import Hashable, Iterable, List, Optional, Tuple

from skillmetrics_gap.core.errors import InvalidInputError, InvalidParameterError
from skillmetrics_gap.core.logging_config import LoggerMixin
from skillmetrics_gap.core.models import ActivityEvent
from skillmetrics_gap.utils.data_normalizers import parse_timestamp


class ActivityMerger(LoggerMixin):
    """
    個人履歴と組織履歴の統合

    - 組織履歴のうち要求者本人のイベントは除外（個人履歴と重複するため）
    - タイムスタンプの降順で安定ソート
    - タイムスタンプが欠損・解釈不能なイベントは最後に回す
    """

    def __init__(self, default_limit: int = 10):
        self.default_limit = default_limit

    def merge(
        self,
        personal_events: Iterable[ActivityEvent],
        org_events: Iterable[ActivityEvent],
        requesting_employee_id: Optional[Hashable],
        limit: Optional[int] = None,
    ) -> List[ActivityEvent]:
        """
        履歴を統合して新しい順に返す

        Args:
            personal_events: 要求者の個人履歴
            org_events: 組織全体の履歴
            requesting_employee_id: 要求者の従業員ID
            limit: 最大件数（Noneの場合はdefault_limit）

        Returns:
            新しい順のイベント（最大limit件）
        """
        if personal_events is None:
            raise InvalidInputError("personal_events", "personal events must not be None")
        if org_events is None:
            raise InvalidInputError("org_events", "org events must not be None")
        if limit is None:
            limit = self.default_limit
        if limit < 0:
            raise InvalidParameterError("limit", limit, "must be >= 0")

        combined = list(personal_events)
        combined.extend(
            event for event in org_events if event.owner_id != requesting_employee_id
        )

        ranked = sorted(combined, key=self._sort_key)
        return ranked[:limit]

    def _sort_key(self, event: ActivityEvent) -> Tuple[int, int]:
        """新しい順。解釈できないタイムスタンプは最後"""
        parsed = parse_timestamp(event.timestamp)
        if parsed is None:
            if event.timestamp is not None:
                self.logger.warning(
                    "unparseable_timestamp", event_id=event.id, timestamp=event.timestamp
                )
            return (1, 0)
        return (0, -parsed.value)
