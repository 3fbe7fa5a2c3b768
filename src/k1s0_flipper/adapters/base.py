"""Adapter 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..feature import Feature
    from ..gates import Gate

RawGateValues = dict[str, Any]


class Adapter(ABC):
    """フィーチャーと生のゲート値を保存するアダプター抽象基底クラス。

    値はゲートキーごとに返す。boolean ゲートは ``"true"``、集合ゲートは文字列の
    set、パーセンテージは数値文字列、expression ゲートはデコード済みの dict
    （または ``None``）。
    """

    name: str = "adapter"

    @abstractmethod
    async def features(self) -> set[str]:
        """既知の全フィーチャーのキーを返す。"""
        ...

    @abstractmethod
    async def add(self, feature: Feature) -> bool:
        """フィーチャーを追加する。新規のときだけ True。"""
        ...

    @abstractmethod
    async def remove(self, feature: Feature) -> bool:
        """フィーチャーとそのゲート値をすべて削除する。"""
        ...

    @abstractmethod
    async def clear(self, feature: Feature) -> bool:
        """フィーチャーは残し、ゲート値だけをすべて削除する。"""
        ...

    @abstractmethod
    async def get(self, feature: Feature) -> RawGateValues: ...

    @abstractmethod
    async def get_multi(self, features: list[Feature]) -> dict[str, RawGateValues]: ...

    @abstractmethod
    async def get_all(self) -> dict[str, RawGateValues]: ...

    @abstractmethod
    async def enable(self, feature: Feature, gate: Gate, thing: Any) -> bool: ...

    @abstractmethod
    async def disable(self, feature: Feature, gate: Gate, thing: Any) -> bool: ...

    def read_only(self) -> bool:
        return False
