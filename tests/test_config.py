"""
設定管理のテスト
"""

import dataclasses

import pytest

from skillmetrics_gap.core.config import (
    AggregationParams,
    Config,
    Environment,
    get_config,
)
from skillmetrics_gap.core.errors import ConfigurationError


class TestConfig:
    """環境ごとの設定"""

    def test_default_is_development(self):
        config = Config.default()
        assert config.environment is Environment.DEVELOPMENT
        assert config.logging.level == "DEBUG"
        assert config.aggregation.n_jobs == 1
        assert config.activity.default_limit == 10

    @pytest.mark.parametrize("env", ["staging", "prod"])
    def test_deployed_environments(self, env):
        config = Config.from_env(env)
        assert config.logging.enable_json is True
        assert config.aggregation.n_jobs == -1

    def test_unknown_environment(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config.from_env("qa")
        assert exc_info.value.context["setting"] == "APP_ENV"

    def test_frozen(self):
        config = Config.default()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.environment = Environment.PRODUCTION

    def test_get_config_reads_app_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "prod")
        assert get_config().environment is Environment.PRODUCTION

    def test_get_config_defaults_to_dev(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)
        assert get_config().environment is Environment.DEVELOPMENT

    def test_explicit_env_overrides_app_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "prod")
        assert get_config("staging").environment is Environment.STAGING


class TestAggregationParams:
    """集計パラメータの検証"""

    @pytest.mark.parametrize(
        "kwargs", [{"shard_size": 0}, {"batch_size": 0}, {"n_jobs": 0}]
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            AggregationParams(**kwargs)

    def test_valid_values(self):
        params = AggregationParams(n_jobs=-1, shard_size=1, batch_size=1, backend="sequential")
        assert params.backend == "sequential"
