"""ゲートが受け付ける型付きの値"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from .coerce import is_number
from .exceptions import FlipperError, FlipperErrorCodes
from .expressions import Constant, Expression, ExpressionRegistry, build_expression

if TYPE_CHECKING:
    from .gate_values import FeatureCheckContext

GroupPredicate = Callable[[Any], Any]

_MISSING = object()


@dataclass
class Actor:
    """最小限のアクター。``flipper_id`` を持つオブジェクトなら何でも使える。"""

    flipper_id: str
    flipper_properties: dict[str, Any] = field(default_factory=dict)


def _field(thing: Any, name: str) -> Any:
    if isinstance(thing, Mapping):
        return thing.get(name, _MISSING)
    return getattr(thing, name, _MISSING)


def is_actor_like(thing: Any) -> bool:
    """``thing`` が属性またはキーとして ``flipper_id`` を持てば True。"""
    if thing is None or isinstance(thing, (str, bool, int, float)):
        return False
    return _field(thing, "flipper_id") is not _MISSING


class ActorType:
    """アクターをラップし、ID を文字列の ``value`` として公開する。"""

    __slots__ = ("thing", "value")

    def __init__(self, thing: Any) -> None:
        flipper_id = _field(thing, "flipper_id")
        if flipper_id is _MISSING or flipper_id is None:
            raise FlipperError(FlipperErrorCodes.INVALID_TYPE, f"Invalid actor type: {thing!r}")
        self.thing = thing
        self.value = str(flipper_id)

    @classmethod
    def wrap(cls, thing: Any) -> ActorType:
        if isinstance(thing, ActorType):
            return thing
        if is_actor_like(thing):
            return cls(thing)
        raise FlipperError(FlipperErrorCodes.INVALID_TYPE, f"Invalid actor type: {thing!r}")

    @property
    def properties(self) -> Mapping[str, Any]:
        """アクターの ``flipper_properties``。なければ空。"""
        properties = _field(self.thing, "flipper_properties")
        if properties is _MISSING or properties is None:
            return {}
        return properties

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ActorType) and other.value == self.value

    def __hash__(self) -> int:
        return hash(("actor", self.value))

    def __repr__(self) -> str:
        return f"ActorType({self.value!r})"


class GroupType:
    """名前付きグループ。メンバー判定関数を持つこともある。"""

    __slots__ = ("value", "callback")

    def __init__(self, value: str, callback: GroupPredicate | None = None) -> None:
        if value is None:
            raise FlipperError(FlipperErrorCodes.INVALID_TYPE, "Invalid group type: None")
        self.value = value
        self.callback = callback

    @classmethod
    def wrap(cls, thing: Any) -> GroupType:
        if isinstance(thing, GroupType):
            return thing
        if isinstance(thing, str):
            return cls(thing)
        raise FlipperError(FlipperErrorCodes.INVALID_TYPE, f"Invalid group type: {thing!r}")

    def is_match(self, actor: ActorType, context: FeatureCheckContext) -> bool:
        if self.callback is None:
            return False
        return bool(self.callback(actor.thing))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, GroupType) and other.value == self.value

    def __hash__(self) -> int:
        return hash(("group", self.value))

    def __repr__(self) -> str:
        return f"GroupType({self.value!r})"


class BooleanType:
    __slots__ = ("value",)

    def __init__(self, value: bool) -> None:
        self.value = value

    @classmethod
    def wrap(cls, thing: Any) -> BooleanType:
        if isinstance(thing, BooleanType):
            return thing
        if isinstance(thing, bool):
            return cls(thing)
        raise FlipperError(FlipperErrorCodes.INVALID_TYPE, f"Invalid boolean type: {thing!r}")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BooleanType) and other.value is self.value

    def __hash__(self) -> int:
        return hash(("boolean", self.value))

    def __repr__(self) -> str:
        return f"BooleanType({self.value!r})"


class _PercentageType:
    __slots__ = ("value",)

    def __init__(self, value: int | float) -> None:
        if not is_number(value):
            raise FlipperError(FlipperErrorCodes.INVALID_TYPE, f"Invalid percentage type: {value!r}")
        if math.isnan(value) or value < 0 or value > 100:
            raise FlipperError(
                FlipperErrorCodes.INVALID_PERCENTAGE,
                f"value must be a positive number less than or equal to 100, but was {value}",
            )
        self.value = value

    @classmethod
    def wrap(cls, thing: Any) -> Any:
        if isinstance(thing, cls):
            return thing
        if is_number(thing):
            return cls(thing)
        raise FlipperError(FlipperErrorCodes.INVALID_TYPE, f"Invalid percentage type: {thing!r}")

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.value == self.value  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class PercentageOfActorsType(_PercentageType):
    """アクターのパーセンテージ（0 以上 100 以下）。"""

    __slots__ = ()


class PercentageOfTimeType(_PercentageType):
    """時間のパーセンテージ（0 以上 100 以下）。"""

    __slots__ = ()


class ExpressionType:
    """式ツリーのラッパー。``value`` は保存用のオブジェクト表記。"""

    __slots__ = ("thing", "value")

    def __init__(self, thing: Expression) -> None:
        self.thing = thing
        # 素のリテラルでは式として読み戻せない
        self.value: dict[str, Any] = {"Constant": thing.value()} if isinstance(thing, Constant) else thing.value()

    @classmethod
    def wrap(cls, thing: Any, registry: ExpressionRegistry | None = None) -> ExpressionType:
        if isinstance(thing, ExpressionType):
            return thing
        if isinstance(thing, Expression):
            return cls(thing)
        if isinstance(thing, Mapping):
            return cls(build_expression(thing, registry))
        raise FlipperError(FlipperErrorCodes.INVALID_TYPE, f"Invalid expression type: {thing!r}")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ExpressionType) and other.thing.equals(self.thing)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ExpressionType({self.value!r})"


TypedValue = ActorType | GroupType | BooleanType | PercentageOfActorsType | PercentageOfTimeType | ExpressionType
