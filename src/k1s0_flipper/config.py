"""設定モデル（YAML から読み込む pydantic モデル）とアダプター組み立て"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .adapters import (
    DEFAULT_ACTOR_LIMIT,
    ActorLimitAdapter,
    Adapter,
    InstrumentedAdapter,
    MemoizableAdapter,
    ReadOnlyAdapter,
    StrictAdapter,
)
from .exceptions import ConfigError, FlipperErrorCodes
from .instrumentation import Instrumenter, LoggingInstrumenter


class FlipperSection(BaseModel):
    """組み込むアダプターラッパーの設定。"""

    strict: Literal["raise", "warn", "noop"] | bool = False
    read_only: bool = False
    actor_limit: int | None = Field(default=DEFAULT_ACTOR_LIMIT, ge=1)
    memoize: bool = False
    instrument: bool = False


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class FlipperConfig(BaseModel):
    flipper: FlipperSection = Field(default_factory=FlipperSection)
    log: LogSection = Field(default_factory=LogSection)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """``base`` のコピーに ``override`` をマージする。リストはマージせず置き換える。"""
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code=FlipperErrorCodes.CONFIG_READ,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            code=FlipperErrorCodes.CONFIG_PARSE,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    return data


def load_config(base_path: Path, env_path: Path | None = None) -> FlipperConfig:
    """設定ファイルを読み込んで FlipperConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
    """
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = deep_merge(data, _read_yaml(env_path))
    try:
        return FlipperConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            code=FlipperErrorCodes.CONFIG_VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e


def build_adapter(
    adapter: Adapter,
    config: FlipperConfig,
    instrumenter: Instrumenter | None = None,
) -> Adapter:
    """設定に従って ``adapter`` をラップする。

    内側から順に actor limit, strict, read only, memoizable, instrumented。
    """
    section = config.flipper
    if section.actor_limit is not None:
        adapter = ActorLimitAdapter(adapter, section.actor_limit)
    if section.strict not in (False, "noop"):
        adapter = StrictAdapter(adapter, section.strict)
    if section.read_only:
        adapter = ReadOnlyAdapter(adapter)
    if section.memoize:
        adapter = MemoizableAdapter(adapter)
    if section.instrument:
        adapter = InstrumentedAdapter(adapter, instrumenter or LoggingInstrumenter())
    return adapter
