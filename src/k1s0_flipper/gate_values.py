"""フィーチャーの保存済みゲート値の型付きスナップショット"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from . import typecast
from .expressions import EvaluationContext
from .types import ActorType


@dataclass(frozen=True)
class GateValues:
    """ゲートキーごとの型付きフィールド。アダプターの生データから都度構築する。"""

    boolean: bool = False
    actors: frozenset[str] = frozenset()
    groups: frozenset[str] = frozenset()
    expression: dict[str, Any] | None = None
    percentage_of_actors: int | float = 0
    percentage_of_time: int | float = 0

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any] | None) -> GateValues:
        raw = raw or {}
        return cls(
            boolean=typecast.to_boolean(raw.get("boolean")),
            actors=typecast.to_set(raw.get("actors")),
            groups=typecast.to_set(raw.get("groups")),
            expression=typecast.to_expression(raw.get("expression")),
            percentage_of_actors=typecast.to_number(raw.get("percentage_of_actors")),
            percentage_of_time=typecast.to_number(raw.get("percentage_of_time")),
        )

    def __getitem__(self, key: str) -> Any:
        if key not in self.__dataclass_fields__:
            raise KeyError(key)
        return getattr(self, key)


@dataclass(frozen=True)
class FeatureCheckContext:
    """ゲートが開閉を判定するときに参照する情報。"""

    feature_name: str
    values: GateValues
    thing: ActorType | None = None

    @property
    def boolean_value(self) -> bool:
        return self.values.boolean

    @property
    def actors_value(self) -> frozenset[str]:
        return self.values.actors

    @property
    def groups_value(self) -> frozenset[str]:
        return self.values.groups

    @property
    def expression_value(self) -> dict[str, Any] | None:
        return self.values.expression

    @property
    def percentage_of_actors_value(self) -> int | float:
        return self.values.percentage_of_actors

    @property
    def percentage_of_time_value(self) -> int | float:
        return self.values.percentage_of_time

    def expression_context(self) -> EvaluationContext:
        """式評価用に絞り込んだコンテキスト。"""
        properties = self.thing.properties if self.thing is not None else {}
        return EvaluationContext(feature_name=self.feature_name, properties=properties)
