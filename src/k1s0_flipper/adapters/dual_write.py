"""DualWriteAdapter 実装"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from .base import Adapter, RawGateValues

if TYPE_CHECKING:
    from ..feature import Feature
    from ..gates import Gate


class DualWriteAdapter(Adapter):
    """``remote``、``local`` の順に書き込み、読み込みは ``local`` からのみ行う。

    ストレージ移行中に使う。新しいアダプターにデータが揃うまで古い方から読む。
    """

    def __init__(self, local: Adapter, remote: Adapter) -> None:
        self.local = local
        self.remote = remote

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.local.name

    async def features(self) -> set[str]:
        return await self.local.features()

    async def get(self, feature: Feature) -> RawGateValues:
        return await self.local.get(feature)

    async def get_multi(self, features: list[Feature]) -> dict[str, RawGateValues]:
        return await self.local.get_multi(features)

    async def get_all(self) -> dict[str, RawGateValues]:
        return await self.local.get_all()

    async def add(self, feature: Feature) -> bool:
        return await self._write(lambda adapter: adapter.add(feature))

    async def remove(self, feature: Feature) -> bool:
        return await self._write(lambda adapter: adapter.remove(feature))

    async def clear(self, feature: Feature) -> bool:
        return await self._write(lambda adapter: adapter.clear(feature))

    async def enable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        return await self._write(lambda adapter: adapter.enable(feature, gate, thing))

    async def disable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        return await self._write(lambda adapter: adapter.disable(feature, gate, thing))

    def read_only(self) -> bool:
        return self.local.read_only()

    async def _write(self, call: Callable[[Adapter], Awaitable[bool]]) -> bool:
        # 戻り値は remote の結果。local は複製するだけ
        result = await call(self.remote)
        await call(self.local)
        return result
