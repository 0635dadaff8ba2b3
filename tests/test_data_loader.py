"""
データローダーのテスト
"""

import numpy as np
import pandas as pd
import pytest

from skillmetrics_gap.core.data_loader import DataLoader
from skillmetrics_gap.core.errors import InvalidInputError
from skillmetrics_gap.core.models import TargetScope


@pytest.fixture
def loader():
    return DataLoader()


class TestLoadCatalog:
    """スキルカタログの読み込み"""

    def test_load(self, loader):
        df = pd.DataFrame(
            {"id": [1, 2], "name": ["Python", "SQL"], "category": ["Programming", np.nan]}
        )
        catalog = loader.load_catalog(df)
        assert len(catalog) == 2
        assert catalog.get(2).category is None
        assert loader.report.statistics["skills_rows"] == 2.0
        assert loader.report.statistics["skills_skipped"] == 0.0

    def test_invalid_rows_skipped(self, loader):
        df = pd.DataFrame({"id": [1, 2], "name": ["Python", "  "]})
        catalog = loader.load_catalog(df)
        assert len(catalog) == 1
        assert loader.report.statistics["skills_skipped"] == 1.0
        assert len(loader.report.warnings) == 1
        assert loader.report.is_valid is True

    def test_none_frame(self, loader):
        with pytest.raises(InvalidInputError):
            loader.load_catalog(None)


class TestLoadAcquiredSkills:
    """習得スキルの読み込み"""

    def test_grouped_by_owner(self, loader):
        df = pd.DataFrame(
            {
                "owner_id": ["e1", "e1", "e2"],
                "name": ["Python", "SQL", "Docker"],
                "level": ["expert", "beginner", None],
            }
        )
        grouped = loader.load_acquired_skills(df)
        assert sorted(grouped) == ["e1", "e2"]
        assert [s.name for s in grouped["e1"]] == ["Python", "SQL"]
        assert grouped["e2"][0].level is None

    def test_camel_case_columns(self, loader):
        df = pd.DataFrame({"userId": ["e1"], "name": ["Go"], "level": ["intermediate"]})
        assert list(loader.load_acquired_skills(df)) == ["e1"]


class TestLoadTargets:
    """目標の読み込み"""

    def test_comma_separated_skill_ids(self, loader):
        df = pd.DataFrame(
            {
                "id": ["T1", "I1"],
                "required_skill_ids": ["1,2,3", "4"],
                "target_level": ["intermediate", None],
                "scope": ["global", "individual"],
                "owner_id": [None, "e1"],
            }
        )
        targets = loader.load_targets(df)
        assert targets[0].required_skill_ids == (1, 2, 3)
        assert targets[0].target_level == "intermediate"
        assert targets[1].scope is TargetScope.INDIVIDUAL
        assert targets[1].target_level is None

    def test_individual_without_owner_skipped(self, loader):
        df = pd.DataFrame({"id": ["X"], "required_skill_ids": ["1"], "scope": ["individual"]})
        assert loader.load_targets(df) == []
        assert loader.report.statistics["targets_skipped"] == 1.0


class TestLoadEvents:
    """履歴の読み込み"""

    def test_load(self, loader):
        df = pd.DataFrame(
            {
                "id": [1, 2],
                "userId": ["e1", "e2"],
                "createdAt": ["2024-01-01", "2024-02-01"],
                "previousLevel": [None, "beginner"],
            }
        )
        events = loader.load_events(df)
        assert [e.change_type for e in events] == ["add", "update"]
