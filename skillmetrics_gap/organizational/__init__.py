"""
組織レベルの分析機能

目標統合、組織全体のギャップ集計、スキル概要メトリクス
"""

__all__ = ["OrgAggregator", "TargetMerger"]

from skillmetrics_gap.organizational.org_aggregator import OrgAggregator
from skillmetrics_gap.organizational.target_merger import TargetMerger
