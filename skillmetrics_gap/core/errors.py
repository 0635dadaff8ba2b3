"""
ギャップ分析エンジンのエラー定義

- エラーコード体系
- 構造化されたエラーコンテキスト
- リトライ可能性の判定

データ品質の問題（未登録スキルID、不明なレベル、不正な日付）は例外にせず、
フォールバック値で処理してログに警告を出す。ここで定義する例外は
呼び出し側のプログラミングエラーや上流ソースの障害のみを表す。
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """エラーコード定義"""

    # データ関連 (D001-D099)
    INVALID_INPUT = "D002"

    # 集計関連 (R001-R099)
    INVALID_PARAMETER = "R001"
    AGGREGATION_CANCELLED = "R002"

    # 外部ソース関連 (E001-E099)
    DATA_SOURCE_UNAVAILABLE = "E001"

    # システム関連 (S001-S099)
    CONFIGURATION_ERROR = "S001"


class GapAnalysisError(Exception):
    """
    ギャップ分析エンジンの基底例外クラス

    全てのカスタム例外はこのクラスを継承する
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        retryable: bool = False,
        **context: Any
    ):
        """
        Args:
            code: エラーコード
            message: エラーメッセージ
            retryable: リトライ可能なエラーか
            **context: エラーコンテキスト（追加情報）
        """
        self.code = code
        self.message = message
        self.retryable = retryable
        self.context = context
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """エラー情報を辞書形式で返す"""
        return {
            'error_code': self.code.value,
            'message': self.message,
            'retryable': self.retryable,
            'context': self.context
        }


# =============================================================================
# 入力関連エラー
# =============================================================================

class InvalidInputError(GapAnalysisError):
    """
    必須の入力が不正

    カタログやスキル一覧がNoneなど、呼び出し側のプログラミングエラー
    """

    def __init__(self, argument: str, reason: str, **context: Any):
        super().__init__(
            ErrorCode.INVALID_INPUT,
            f"Invalid input '{argument}': {reason}",
            retryable=False,
            argument=argument,
            reason=reason,
            **context
        )


class InvalidParameterError(GapAnalysisError):
    """パラメータが不正"""

    def __init__(self, parameter: str, value: Any, reason: str):
        super().__init__(
            ErrorCode.INVALID_PARAMETER,
            f"Invalid parameter '{parameter}': {reason}",
            retryable=False,
            parameter=parameter,
            value=str(value),
            reason=reason
        )


# =============================================================================
# 集計関連エラー
# =============================================================================

class AggregationCancelledError(GapAnalysisError):
    """組織集計がバッチ間でキャンセルされた"""

    def __init__(self, completed_shards: int, total_shards: int, reason: str = "cancelled"):
        super().__init__(
            ErrorCode.AGGREGATION_CANCELLED,
            f"Organization aggregation {reason} after {completed_shards}/{total_shards} shards",
            retryable=True,
            completed_shards=completed_shards,
            total_shards=total_shards,
            reason=reason
        )


# =============================================================================
# 外部ソース関連エラー
# =============================================================================

class DataSourceUnavailableError(GapAnalysisError):
    """上流のデータソースに到達できない"""

    def __init__(self, source: str, message: str, **context: Any):
        super().__init__(
            ErrorCode.DATA_SOURCE_UNAVAILABLE,
            f"Data source unavailable ({source}): {message}",
            retryable=True,
            source=source,
            **context
        )


# =============================================================================
# システム関連エラー
# =============================================================================

class ConfigurationError(GapAnalysisError):
    """設定エラー"""

    def __init__(self, message: str, setting: Optional[str] = None, **context: Any):
        super().__init__(
            ErrorCode.CONFIGURATION_ERROR,
            message,
            retryable=False,
            setting=setting,
            **context
        )
