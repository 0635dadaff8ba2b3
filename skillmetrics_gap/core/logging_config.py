"""
構造化ロギング設定

- イベント名 + キーワード引数による検索・集計可能なログ
- prod/staging ではJSON形式、dev ではコンソール形式
- ライブラリとして組み込まれることを前提に、ルートロガーには
  このモジュールが追加したハンドラだけを付け替える
"""

import logging
import sys
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger


# このモジュールが追加するハンドラの識別名
HANDLER_NAME = "skillmetrics_gap"


def _build_processors(enable_json: bool) -> list:
    processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if enable_json:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def _build_handler(level: int, enable_json: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    if enable_json:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s", timestamp=True
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_structured_logging(
    log_level: str = "INFO", enable_json: bool = True, enable_console: bool = True
) -> Optional[logging.Handler]:
    """
    構造化ロギングをセットアップ

    繰り返し呼び出した場合は前回追加したハンドラを置き換える。
    アプリケーション側が追加したハンドラには触れない。

    Args:
        log_level: ログレベル（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        enable_json: JSON形式で出力するか
        enable_console: コンソールに出力するか

    Returns:
        追加したハンドラ（enable_console=False の場合はNone）
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=_build_processors(enable_json),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if h.get_name() == HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.setLevel(level)

    if not enable_console:
        return None
    handler = _build_handler(level, enable_json)
    root_logger.addHandler(handler)
    return handler


def setup_from_config(config: Any) -> Optional[logging.Handler]:
    """Config.logging の値でロギングをセットアップ"""
    params = config.logging
    return setup_structured_logging(
        log_level=params.level,
        enable_json=params.enable_json,
        enable_console=params.enable_console,
    )


def get_logger(name: str) -> Any:
    """
    構造化ロガーを取得

    Usage:
        logger = get_logger(__name__)
        logger.warning("dangling_skill_reference", skill_id=42, target_id=7)
    """
    return structlog.get_logger(name)


class LoggerMixin:
    """
    ロガーをクラスに追加するMixin

    Usage:
        class OrgAggregator(LoggerMixin):
            def aggregate(self, ...):
                self.logger.info("org_aggregation_started", targets=len(targets))
    """

    @property
    def logger(self) -> Any:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__module__ + "." + self.__class__.__name__)
        return self._logger
