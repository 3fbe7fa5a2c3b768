"""フィーチャー（有効化・無効化のゲートへの振り分けと有効判定）"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any, TypeVar

from .adapters import Adapter
from .expressions import DEFAULT_REGISTRY, Expression, ExpressionRegistry
from .gate_values import FeatureCheckContext, GateValues
from .gates import Gate, build_gates, gate_for
from .instrumentation import FEATURE_OPERATION, Instrumenter, NoopInstrumenter, Payload
from .types import (
    ActorType,
    ExpressionType,
    GroupType,
    PercentageOfActorsType,
    PercentageOfTimeType,
)

T = TypeVar("T")


class FeatureState(str, Enum):
    ON = "on"
    OFF = "off"
    CONDITIONAL = "conditional"


class Feature:
    """6 種類のゲートで判定される名前付きフィーチャー。

    フィーチャー自体はゲート値を保持しない。読み込みのたびにアダプターへ問い合わせ、
    新しい ``GateValues`` を構築する。
    """

    def __init__(
        self,
        name: str,
        adapter: Adapter,
        groups: Mapping[str, GroupType] | None = None,
        instrumenter: Instrumenter | None = None,
        registry: ExpressionRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self.name = name
        self.key = name
        self.adapter = adapter
        self.groups: Mapping[str, GroupType] = groups if groups is not None else {}
        self.instrumenter: Instrumenter = instrumenter or NoopInstrumenter()
        self.registry = registry
        self.gates: tuple[Gate, ...] = build_gates(self.groups, registry)

    # 書き込み

    async def enable(self, thing: Any = None) -> bool:
        """``thing`` を受け持つゲートで有効化する。引数なしなら全員に有効化。"""
        return await self._write("enable", True if thing is None else thing)

    async def disable(self, thing: Any = None) -> bool:
        """``thing`` を受け持つゲートで無効化する。引数なしなら全員に無効化。"""
        return await self._write("disable", False if thing is None else thing)

    async def enable_actor(self, actor: Any) -> bool:
        return await self.enable(ActorType.wrap(actor))

    async def enable_group(self, group_name: str | GroupType) -> bool:
        return await self.enable(GroupType.wrap(group_name))

    async def enable_percentage_of_actors(self, percentage: int | float) -> bool:
        return await self.enable(PercentageOfActorsType.wrap(percentage))

    async def enable_percentage_of_time(self, percentage: int | float) -> bool:
        return await self.enable(PercentageOfTimeType.wrap(percentage))

    async def enable_expression(self, expression: Expression | Mapping[str, Any]) -> bool:
        return await self.enable(ExpressionType.wrap(expression, self.registry))

    async def disable_actor(self, actor: Any) -> bool:
        return await self.disable(ActorType.wrap(actor))

    async def disable_group(self, group_name: str | GroupType) -> bool:
        return await self.disable(GroupType.wrap(group_name))

    async def disable_percentage_of_actors(self) -> bool:
        return await self.disable(PercentageOfActorsType(0))

    async def disable_percentage_of_time(self) -> bool:
        return await self.disable(PercentageOfTimeType(0))

    async def disable_expression(self) -> bool:
        """式だけを削除する。他のゲートには触れない。"""
        gate = self.gates_hash()["expression"]

        async def run(payload: Payload) -> bool:
            payload["gate_name"] = gate.key
            await self.adapter.add(self)
            return await self.adapter.disable(self, gate, None)

        return await self._instrument("disable", run)

    async def _write(self, operation: str, thing: Any) -> bool:
        gate = self.gate_for(thing)
        wrapped = gate.wrap(thing)

        async def run(payload: Payload) -> bool:
            payload["gate_name"] = gate.key
            payload["thing"] = wrapped
            await self.adapter.add(self)
            if operation == "enable":
                return await self.adapter.enable(self, gate, wrapped)
            return await self.adapter.disable(self, gate, wrapped)

        return await self._instrument(operation, run)

    # 読み込み

    async def is_enabled(self, thing: Any = None) -> bool:
        """``thing``（またはアクターなし）に対していずれかのゲートが開いていれば True。"""

        async def run(payload: Payload) -> bool:
            values = await self.gate_values()
            actor = None
            if thing is not None:
                payload["thing"] = thing
                actor = ActorType.wrap(thing)
            context = FeatureCheckContext(self.name, values, actor)
            for gate in self.gates:
                if gate.is_open(context):
                    payload["gate_name"] = gate.key
                    return True
            return False

        return await self._instrument("enabled?", run)

    async def state(self) -> FeatureState:
        values = await self.gate_values()
        if values.boolean or values.percentage_of_time == 100:
            return FeatureState.ON
        # boolean ゲートが False でも conditional にはならない
        if any(gate.is_enabled(values[gate.key]) for gate in self.gates if gate.key != "boolean"):
            return FeatureState.CONDITIONAL
        return FeatureState.OFF

    async def is_on(self) -> bool:
        return await self.state() is FeatureState.ON

    async def is_off(self) -> bool:
        return await self.state() is FeatureState.OFF

    async def is_conditional(self) -> bool:
        return await self.state() is FeatureState.CONDITIONAL

    async def gate_values(self) -> GateValues:
        return GateValues.from_raw(await self.adapter.get(self))

    async def boolean_value(self) -> bool:
        return (await self.gate_values()).boolean

    async def actors_value(self) -> frozenset[str]:
        return (await self.gate_values()).actors

    async def groups_value(self) -> frozenset[str]:
        return (await self.gate_values()).groups

    async def percentage_of_actors_value(self) -> int | float:
        return (await self.gate_values()).percentage_of_actors

    async def percentage_of_time_value(self) -> int | float:
        return (await self.gate_values()).percentage_of_time

    async def expression_value(self) -> dict[str, Any] | None:
        return (await self.gate_values()).expression

    # ライフサイクル

    async def add(self) -> bool:
        return await self._instrument("add", lambda payload: self.adapter.add(self))

    async def exist(self) -> bool:
        async def run(payload: Payload) -> bool:
            return self.key in await self.adapter.features()

        return await self._instrument("exist?", run)

    async def remove(self) -> bool:
        return await self._instrument("remove", lambda payload: self.adapter.remove(self))

    async def clear(self) -> bool:
        return await self._instrument("clear", lambda payload: self.adapter.clear(self))

    # 状態参照

    async def enabled_gates(self) -> list[Gate]:
        values = await self.gate_values()
        return [gate for gate in self.gates if gate.is_enabled(values[gate.key])]

    async def disabled_gates(self) -> list[Gate]:
        enabled = await self.enabled_gates()
        return [gate for gate in self.gates if gate not in enabled]

    async def enabled_gate_names(self) -> list[str]:
        return [gate.name for gate in await self.enabled_gates()]

    async def disabled_gate_names(self) -> list[str]:
        return [gate.name for gate in await self.disabled_gates()]

    async def enabled_groups(self) -> list[GroupType]:
        names = await self.groups_value()
        return [group for group in self.groups.values() if group.value in names]

    async def disabled_groups(self) -> list[GroupType]:
        names = await self.groups_value()
        return [group for group in self.groups.values() if group.value not in names]

    def gate_for(self, thing: Any) -> Gate:
        """判定順で ``thing`` を受け持つ最初のゲート。なければ ``GATE_NOT_FOUND``。"""
        return gate_for(self.gates, thing)

    def gate(self, name: str) -> Gate | None:
        return next((gate for gate in self.gates if gate.name == name), None)

    def gates_hash(self) -> dict[str, Gate]:
        return {gate.name: gate for gate in self.gates}

    async def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "state": (await self.state()).value,
            "enabled_gates": await self.enabled_gate_names(),
            "adapter": self.adapter.name,
        }

    async def _instrument(self, operation: str, fn: Callable[[Payload], Awaitable[T]]) -> T:
        payload: Payload = {"feature_name": self.name, "operation": operation}
        return await self.instrumenter.instrument(FEATURE_OPERATION, payload, fn)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Feature({self.name!r})"
