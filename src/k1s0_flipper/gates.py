"""フィーチャーを判定する 6 種類のゲート"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from typing import Any

import structlog

from .coerce import truthy
from .exceptions import FlipperError, FlipperErrorCodes
from .expressions import DEFAULT_REGISTRY, Expression, ExpressionRegistry, build_expression, in_rollout
from .gate_values import FeatureCheckContext
from .types import (
    ActorType,
    BooleanType,
    ExpressionType,
    GroupType,
    PercentageOfActorsType,
    PercentageOfTimeType,
    TypedValue,
    is_actor_like,
)

logger = structlog.get_logger(__name__)


class DataType(str, Enum):
    """ゲート値のストレージ上の表現。"""

    BOOLEAN = "boolean"
    SET = "set"
    NUMBER = "number"
    JSON = "json"


class Gate(ABC):
    """フィーチャーを有効化する仕組み。"""

    name: str
    key: str
    data_type: DataType

    @abstractmethod
    def is_enabled(self, value: Any) -> bool:
        """保存値 ``value`` によってこのゲートが誰かに対して有効なら True。"""

    @abstractmethod
    def is_open(self, context: FeatureCheckContext) -> bool:
        """このゲートが ``context.thing`` を通すなら True。"""

    @abstractmethod
    def protects_thing(self, thing: Any) -> bool:
        """``thing`` の有効化・無効化をこのゲートが受け持つなら True。"""

    @abstractmethod
    def wrap(self, thing: Any) -> TypedValue: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BooleanGate(Gate):
    name = "boolean"
    key = "boolean"
    data_type = DataType.BOOLEAN

    def is_enabled(self, value: Any) -> bool:
        return value is True

    def is_open(self, context: FeatureCheckContext) -> bool:
        return context.boolean_value is True

    def protects_thing(self, thing: Any) -> bool:
        return isinstance(thing, (BooleanType, bool))

    def wrap(self, thing: Any) -> BooleanType:
        return BooleanType.wrap(thing)


class ExpressionGate(Gate):
    """保存された式がアクターに対して truthy に評価されれば開く。

    評価エラーは外に出さない。ログに記録し、ゲートは閉じたままにする。
    """

    name = "expression"
    key = "expression"
    data_type = DataType.JSON

    def __init__(self, registry: ExpressionRegistry = DEFAULT_REGISTRY) -> None:
        self.registry = registry

    def is_enabled(self, value: Any) -> bool:
        return isinstance(value, Mapping) and len(value) > 0

    def is_open(self, context: FeatureCheckContext) -> bool:
        literal = context.expression_value
        if not self.is_enabled(literal):
            return False
        try:
            expression = build_expression(literal, self.registry)
            return truthy(expression.evaluate(context.expression_context()))
        except Exception as e:
            logger.warning(
                "expression evaluation failed",
                feature_name=context.feature_name,
                expression=literal,
                error=str(e),
            )
            return False

    def protects_thing(self, thing: Any) -> bool:
        return isinstance(thing, (ExpressionType, Expression))

    def wrap(self, thing: Any) -> ExpressionType:
        return ExpressionType.wrap(thing, self.registry)


class ActorGate(Gate):
    name = "actor"
    key = "actors"
    data_type = DataType.SET

    def is_enabled(self, value: Any) -> bool:
        return bool(value)

    def is_open(self, context: FeatureCheckContext) -> bool:
        if context.thing is None:
            return False
        actor_id = context.thing.value
        # 空の ID はアクターとして扱わない
        if not actor_id:
            return False
        return actor_id in context.actors_value

    def protects_thing(self, thing: Any) -> bool:
        return isinstance(thing, ActorType) or is_actor_like(thing)

    def wrap(self, thing: Any) -> ActorType:
        return ActorType.wrap(thing)


class GroupGate(Gate):
    """有効かつ登録済みのグループのいずれかにアクターが一致すれば開く。"""

    name = "group"
    key = "groups"
    data_type = DataType.SET

    def __init__(self, groups: Mapping[str, GroupType]) -> None:
        self.groups = groups

    def is_enabled(self, value: Any) -> bool:
        return bool(value)

    def is_open(self, context: FeatureCheckContext) -> bool:
        if context.thing is None:
            return False
        for group_name in sorted(context.groups_value):
            group = self.groups.get(group_name)
            if group is not None and group.is_match(context.thing, context):
                return True
        return False

    def protects_thing(self, thing: Any) -> bool:
        return isinstance(thing, (GroupType, str))

    def wrap(self, thing: Any) -> GroupType:
        return GroupType.wrap(thing)


class PercentageOfActorsGate(Gate):
    name = "percentage_of_actors"
    key = "percentage_of_actors"
    data_type = DataType.NUMBER

    def is_enabled(self, value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0

    def is_open(self, context: FeatureCheckContext) -> bool:
        if context.thing is None:
            return False
        return in_rollout(context.feature_name, context.thing.value, context.percentage_of_actors_value)

    def protects_thing(self, thing: Any) -> bool:
        return isinstance(thing, PercentageOfActorsType)

    def wrap(self, thing: Any) -> PercentageOfActorsType:
        return PercentageOfActorsType.wrap(thing)


class PercentageOfTimeGate(Gate):
    """判定のうちランダムな割合で開く。アクターごとに固定されない。"""

    name = "percentage_of_time"
    key = "percentage_of_time"
    data_type = DataType.NUMBER

    def is_enabled(self, value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0

    def is_open(self, context: FeatureCheckContext) -> bool:
        return random.random() < context.percentage_of_time_value / 100

    def protects_thing(self, thing: Any) -> bool:
        return isinstance(thing, PercentageOfTimeType)

    def wrap(self, thing: Any) -> PercentageOfTimeType:
        return PercentageOfTimeType.wrap(thing)


GATE_ORDER: tuple[type[Gate], ...] = (
    BooleanGate,
    ExpressionGate,
    ActorGate,
    GroupGate,
    PercentageOfActorsGate,
    PercentageOfTimeGate,
)


def build_gates(
    groups: Mapping[str, GroupType],
    registry: ExpressionRegistry = DEFAULT_REGISTRY,
) -> tuple[Gate, ...]:
    """全ゲートのインスタンスを判定順に返す。"""
    gates: list[Gate] = []
    for cls in GATE_ORDER:
        if cls is GroupGate:
            gates.append(GroupGate(groups))
        elif cls is ExpressionGate:
            gates.append(ExpressionGate(registry))
        else:
            gates.append(cls())
    return tuple(gates)


def gate_for(gates: tuple[Gate, ...], thing: Any) -> Gate:
    """``thing`` を受け持つ最初のゲートを返す。"""
    for gate in gates:
        if gate.protects_thing(thing):
            return gate
    raise FlipperError(FlipperErrorCodes.GATE_NOT_FOUND, f"No gate found for {thing!r}")
