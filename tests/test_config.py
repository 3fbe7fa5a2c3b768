"""設定のユニットテスト"""

from pathlib import Path

import pytest
from k1s0_flipper.adapters import (
    ActorLimitAdapter,
    InMemoryAdapter,
    InstrumentedAdapter,
    MemoizableAdapter,
    ReadOnlyAdapter,
    StrictAdapter,
)
from k1s0_flipper.config import FlipperConfig, build_adapter, deep_merge, load_config
from k1s0_flipper.exceptions import ConfigError, FlipperErrorCodes
from k1s0_flipper.instrumentation import LoggingInstrumenter, MemoryInstrumenter


def test_defaults() -> None:
    """空の設定ではアクター数の制限だけが有効。"""
    config = FlipperConfig()
    assert config.flipper.strict is False
    assert config.flipper.actor_limit == 100
    assert config.log.format == "json"


def test_load_config(tmp_path: Path) -> None:
    """YAML から設定を読み込む。"""
    config_file = tmp_path / "flipper.yaml"
    config_file.write_text("flipper:\n  strict: warn\n  memoize: true\nlog:\n  level: DEBUG\n  format: text\n")
    config = load_config(config_file)
    assert config.flipper.strict == "warn"
    assert config.flipper.memoize is True
    assert config.log.level == "DEBUG"
    assert config.log.format == "text"


def test_load_config_boolean_strict(tmp_path: Path) -> None:
    """strict は真偽値も受け付ける。"""
    config_file = tmp_path / "flipper.yaml"
    config_file.write_text("flipper:\n  strict: true\n")
    assert load_config(config_file).flipper.strict is True


def test_load_config_with_env_override(tmp_path: Path) -> None:
    """環境別設定ファイルがベースにマージされる。"""
    base_file = tmp_path / "base.yaml"
    base_file.write_text("flipper:\n  read_only: false\n  actor_limit: 50\n")
    env_file = tmp_path / "prod.yaml"
    env_file.write_text("flipper:\n  read_only: true\n")
    config = load_config(base_file, env_file)
    assert config.flipper.read_only is True
    assert config.flipper.actor_limit == 50


def test_load_config_env_missing(tmp_path: Path) -> None:
    """存在しない環境別設定ファイルは無視する。"""
    base_file = tmp_path / "base.yaml"
    base_file.write_text("flipper:\n  actor_limit: null\n")
    assert load_config(base_file, tmp_path / "missing.yaml").flipper.actor_limit is None


def test_load_config_errors(tmp_path: Path) -> None:
    """読み込み・解析・検証の失敗はそれぞれのエラーコードになる。"""
    with pytest.raises(ConfigError) as exc_info:
        load_config(tmp_path / "missing.yaml")
    assert exc_info.value.code == FlipperErrorCodes.CONFIG_READ
    assert isinstance(exc_info.value.__cause__, OSError)

    bad_yaml = tmp_path / "bad.yaml"
    bad_yaml.write_text("flipper: {strict: raise: x:\n")
    with pytest.raises(ConfigError) as exc_info:
        load_config(bad_yaml)
    assert exc_info.value.code == FlipperErrorCodes.CONFIG_PARSE

    invalid = tmp_path / "invalid.yaml"
    invalid.write_text("flipper:\n  strict: loud\n  actor_limit: 0\n")
    with pytest.raises(ConfigError) as exc_info:
        load_config(invalid)
    assert exc_info.value.code == FlipperErrorCodes.CONFIG_VALIDATION


def test_deep_merge() -> None:
    """ネストした dict はマージし、それ以外は置き換える。"""
    merged = deep_merge({"a": {"b": 1, "c": [1]}, "d": 1}, {"a": {"c": [2]}, "e": 2})
    assert merged == {"a": {"b": 1, "c": [2]}, "d": 1, "e": 2}


def test_build_adapter_default_stack() -> None:
    """デフォルトではアクター数制限だけが組み込まれる。"""
    memory = InMemoryAdapter()
    adapter = build_adapter(memory, FlipperConfig())
    assert isinstance(adapter, ActorLimitAdapter)
    assert adapter.adapter is memory
    assert adapter.limit == 100


def test_build_adapter_full_stack() -> None:
    """ラッパーは内側から固定の順序で重なる。"""
    memory = InMemoryAdapter()
    instrumenter = MemoryInstrumenter()
    config = FlipperConfig.model_validate(
        {
            "flipper": {
                "strict": "raise",
                "read_only": True,
                "actor_limit": 10,
                "memoize": True,
                "instrument": True,
            }
        }
    )
    adapter = build_adapter(memory, config, instrumenter)
    layers = []
    current = adapter
    while current is not memory:
        layers.append(type(current))
        current = current.adapter  # type: ignore[attr-defined]
    assert layers == [
        InstrumentedAdapter,
        MemoizableAdapter,
        ReadOnlyAdapter,
        StrictAdapter,
        ActorLimitAdapter,
    ]
    assert adapter.instrumenter is instrumenter  # type: ignore[attr-defined]
    assert adapter.read_only() is True


def test_build_adapter_skips_disabled_wrappers() -> None:
    """strict が noop でアクター上限が null なら何も追加しない。"""
    memory = InMemoryAdapter()
    config = FlipperConfig.model_validate({"flipper": {"strict": "noop", "actor_limit": None, "instrument": True}})
    adapter = build_adapter(memory, config)
    assert isinstance(adapter, InstrumentedAdapter)
    assert isinstance(adapter.instrumenter, LoggingInstrumenter)
    assert adapter.adapter is memory
