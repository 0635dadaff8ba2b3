"""
アクティビティ履歴
"""

__all__ = ["ActivityMerger"]

from skillmetrics_gap.activity.activity_merger import ActivityMerger
