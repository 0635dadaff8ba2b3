"""
Utility helpers
"""

from skillmetrics_gap.utils.data_normalizers import (
    normalize_skill_name,
    parse_date,
    parse_timestamp,
)

__all__ = ["normalize_skill_name", "parse_date", "parse_timestamp"]
