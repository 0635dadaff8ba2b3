"""
設定管理

- 不変（Immutable）設定
- 環境分離（dev/staging/prod）
- 型安全性
- テスト容易性
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Final

from skillmetrics_gap.core.errors import ConfigurationError


class Environment(Enum):
    """環境種別"""
    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"


@dataclass(frozen=True)
class MatchingParams:
    """スキルマッチングパラメータ"""
    warn_on_dangling_reference: bool = True  # カタログに存在しないスキルIDを警告するか
    warn_on_unknown_level: bool = True  # 不明な習熟度レベルを警告するか


@dataclass(frozen=True)
class AggregationParams:
    """組織集計パラメータ"""
    n_jobs: int = 1  # 並列ジョブ数（1=逐次実行、-1=全コア）
    shard_size: int = 500  # 1シャードあたりの従業員数
    batch_size: int = 8  # キャンセル判定の間に実行するシャード数
    backend: Literal["threading", "sequential"] = "threading"

    def __post_init__(self) -> None:
        if self.shard_size < 1:
            raise ConfigurationError("shard_size must be >= 1", setting="shard_size")
        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be >= 1", setting="batch_size")
        if self.n_jobs == 0:
            raise ConfigurationError("n_jobs must not be 0", setting="n_jobs")


@dataclass(frozen=True)
class ActivityParams:
    """アクティビティ統合パラメータ"""
    default_limit: int = 10
    max_limit: int = 100


@dataclass(frozen=True)
class RetryParams:
    """上流ソース取得時のリトライパラメータ"""
    max_attempts: int = 3
    min_wait_seconds: float = 1
    max_wait_seconds: float = 10


@dataclass(frozen=True)
class LoggingParams:
    """ログ設定"""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    enable_json: bool = False  # dev環境ではfalse、prod環境ではtrue
    enable_console: bool = True


@dataclass(frozen=True)
class Config:
    """
    システム設定（不変）

    全ての設定は不変（frozen=True）であり、
    環境ごとに異なるインスタンスを作成する
    """
    environment: Environment = Environment.DEVELOPMENT
    matching: MatchingParams = field(default_factory=MatchingParams)
    aggregation: AggregationParams = field(default_factory=AggregationParams)
    activity: ActivityParams = field(default_factory=ActivityParams)
    retry: RetryParams = field(default_factory=RetryParams)
    logging: LoggingParams = field(default_factory=LoggingParams)

    @classmethod
    def from_env(cls, env: str = "dev") -> "Config":
        """
        環境名から設定を作成

        Args:
            env: 環境名（dev, staging, prod）

        Returns:
            Config インスタンス

        Raises:
            ConfigurationError: 未知の環境名の場合
        """
        try:
            environment = Environment(env)
        except ValueError as e:
            raise ConfigurationError(f"Unknown environment: {env!r}", setting="APP_ENV") from e

        if environment == Environment.PRODUCTION:
            logging_params = LoggingParams(level="INFO", enable_json=True)
            aggregation = AggregationParams(n_jobs=-1)
        elif environment == Environment.STAGING:
            logging_params = LoggingParams(level="INFO", enable_json=True)
            aggregation = AggregationParams(n_jobs=-1)
        else:  # DEVELOPMENT
            logging_params = LoggingParams(level="DEBUG", enable_json=False)
            aggregation = AggregationParams()

        return cls(
            environment=environment,
            aggregation=aggregation,
            logging=logging_params
        )

    @classmethod
    def default(cls) -> "Config":
        """デフォルト設定（開発環境）を取得"""
        return cls.from_env("dev")


DEFAULT_CONFIG: Final[Config] = Config.default()


def get_config(env: str | None = None) -> Config:
    """
    設定を取得

    Args:
        env: 環境名（Noneの場合は環境変数 APP_ENV から取得、デフォルトは "dev"）

    Returns:
        Config インスタンス
    """
    if env is None:
        env = os.getenv("APP_ENV", "dev")

    return Config.from_env(env)
