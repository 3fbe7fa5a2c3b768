"""例外のユニットテスト"""

from k1s0_flipper.exceptions import (
    ActorLimitExceededError,
    ConfigError,
    FeatureNotFoundError,
    FlipperError,
    FlipperErrorCodes,
    WriteAttemptedError,
)


def test_flipper_error_str() -> None:
    """str() はコードとメッセージを出力する。"""
    error = FlipperError(FlipperErrorCodes.INVALID_TYPE, "bad")
    assert str(error) == "INVALID_TYPE: bad"
    assert error.code == "INVALID_TYPE"


def test_feature_not_found_error() -> None:
    """メッセージにフィーチャーの追加方法が含まれる。"""
    error = FeatureNotFoundError("search")
    assert isinstance(error, FlipperError)
    assert error.feature_name == "search"
    assert str(error) == 'FEATURE_NOT_FOUND: Could not find feature "search". Call `flipper.add("search")` to create it.'


def test_write_attempted_error() -> None:
    """読み取り専用エラーの既定メッセージ。"""
    assert str(WriteAttemptedError()) == "READ_ONLY: write attempted while in read only mode"


def test_actor_limit_exceeded_error() -> None:
    """上限とフィーチャー名を保持する。"""
    error = ActorLimitExceededError("search", 100)
    assert error.limit == 100
    assert error.feature_name == "search"


def test_config_error_cause() -> None:
    """原因の例外が連結される。"""
    cause = OSError("missing")
    error = ConfigError(FlipperErrorCodes.CONFIG_READ, "read failed", cause=cause)
    assert error.__cause__ is cause
    assert str(error) == "CONFIG_READ: read failed"
