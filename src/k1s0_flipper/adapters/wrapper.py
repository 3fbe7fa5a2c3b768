"""他のアダプターを包むアダプターの基底クラス"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from .base import Adapter, RawGateValues

if TYPE_CHECKING:
    from ..feature import Feature
    from ..gates import Gate

T = TypeVar("T")

WRITE_OPERATIONS = frozenset({"add", "remove", "clear", "enable", "disable"})


class Wrapper(Adapter):
    """全操作を ``_wrap`` 経由で ``adapter`` に委譲する。

    サブクラスは ``_wrap`` をオーバーライドして全操作をまとめて観測・拒否するか、
    個別の操作をオーバーライドする。
    """

    def __init__(self, adapter: Adapter) -> None:
        self.adapter = adapter

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.adapter.name

    async def features(self) -> set[str]:
        return await self._wrap("features", self.adapter.features)

    async def add(self, feature: Feature) -> bool:
        return await self._wrap("add", lambda: self.adapter.add(feature), feature_name=feature.name)

    async def remove(self, feature: Feature) -> bool:
        return await self._wrap("remove", lambda: self.adapter.remove(feature), feature_name=feature.name)

    async def clear(self, feature: Feature) -> bool:
        return await self._wrap("clear", lambda: self.adapter.clear(feature), feature_name=feature.name)

    async def get(self, feature: Feature) -> RawGateValues:
        return await self._wrap("get", lambda: self.adapter.get(feature), feature_name=feature.name)

    async def get_multi(self, features: list[Feature]) -> dict[str, RawGateValues]:
        return await self._wrap(
            "get_multi",
            lambda: self.adapter.get_multi(features),
            feature_names=[feature.name for feature in features],
        )

    async def get_all(self) -> dict[str, RawGateValues]:
        return await self._wrap("get_all", self.adapter.get_all)

    async def enable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        return await self._wrap(
            "enable",
            lambda: self.adapter.enable(feature, gate, thing),
            feature_name=feature.name,
            gate_name=gate.key,
        )

    async def disable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        return await self._wrap(
            "disable",
            lambda: self.adapter.disable(feature, gate, thing),
            feature_name=feature.name,
            gate_name=gate.key,
        )

    def read_only(self) -> bool:
        return self.adapter.read_only()

    async def _wrap(self, operation: str, call: Callable[[], Awaitable[T]], **details: Any) -> T:
        return await call()
