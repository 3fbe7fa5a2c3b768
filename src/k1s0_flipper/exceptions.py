"""flipper ライブラリの例外型定義"""

from __future__ import annotations


class FlipperError(Exception):
    """flipper ライブラリのエラー基底クラス。"""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class FlipperErrorCodes:
    """エラーコード定数。"""

    INVALID_PERCENTAGE: str = "INVALID_PERCENTAGE"
    INVALID_TYPE: str = "INVALID_TYPE"
    UNKNOWN_EXPRESSION: str = "UNKNOWN_EXPRESSION"
    INVALID_EXPRESSION: str = "INVALID_EXPRESSION"
    INVALID_DURATION: str = "INVALID_DURATION"
    GATE_NOT_FOUND: str = "GATE_NOT_FOUND"
    FEATURE_NOT_FOUND: str = "FEATURE_NOT_FOUND"
    READ_ONLY: str = "READ_ONLY"
    ACTOR_LIMIT_EXCEEDED: str = "ACTOR_LIMIT_EXCEEDED"
    CONFIG_READ: str = "CONFIG_READ"
    CONFIG_PARSE: str = "CONFIG_PARSE"
    CONFIG_VALIDATION: str = "CONFIG_VALIDATION"


class FeatureNotFoundError(FlipperError):
    """追加されていないフィーチャーを strict アダプターで読んだときのエラー。"""

    def __init__(self, name: str) -> None:
        self.feature_name = name
        super().__init__(
            FlipperErrorCodes.FEATURE_NOT_FOUND,
            f'Could not find feature "{name}". Call `flipper.add("{name}")` to create it.',
        )


class WriteAttemptedError(FlipperError):
    """読み取り専用アダプターに書き込んだときのエラー。"""

    def __init__(self, message: str = "write attempted while in read only mode") -> None:
        super().__init__(FlipperErrorCodes.READ_ONLY, message)


class ActorLimitExceededError(FlipperError):
    """フィーチャーのアクター数が上限に達しているときのエラー。"""

    def __init__(self, feature_name: str, limit: int) -> None:
        self.feature_name = feature_name
        self.limit = limit
        super().__init__(
            FlipperErrorCodes.ACTOR_LIMIT_EXCEEDED,
            f"Actor limit of {limit} exceeded for feature {feature_name}",
        )


class ConfigError(FlipperError):
    """設定の読み込み・検証に失敗したときのエラー。"""

    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(code, message)
        if cause is not None:
            self.__cause__ = cause
