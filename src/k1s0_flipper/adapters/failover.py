"""FailoverAdapter 実装"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from .base import Adapter, RawGateValues

if TYPE_CHECKING:
    from ..feature import Feature
    from ..gates import Gate

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class FailoverAdapter(Adapter):
    """``primary`` から読み込み、失敗したら ``secondary`` にフォールバックする。

    書き込みは常に ``primary`` に行う。``dual_write`` 指定時は ``secondary`` にも
    書き込み、フォールバック先を同期させる。

    使用例:
        adapter = FailoverAdapter(cache_adapter, database_adapter, dual_write=True)
    """

    def __init__(
        self,
        primary: Adapter,
        secondary: Adapter,
        dual_write: bool = False,
        errors: tuple[type[Exception], ...] = (Exception,),
    ) -> None:
        self.primary = primary
        self.secondary = secondary
        self.dual_write = dual_write
        self.errors = errors

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.primary.name

    async def features(self) -> set[str]:
        return await self._read("features", lambda adapter: adapter.features())

    async def get(self, feature: Feature) -> RawGateValues:
        return await self._read("get", lambda adapter: adapter.get(feature))

    async def get_multi(self, features: list[Feature]) -> dict[str, RawGateValues]:
        return await self._read("get_multi", lambda adapter: adapter.get_multi(features))

    async def get_all(self) -> dict[str, RawGateValues]:
        return await self._read("get_all", lambda adapter: adapter.get_all())

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
        return self.primary.read_only()

    async def _read(self, operation: str, call: Callable[[Adapter], Awaitable[T]]) -> T:
        try:
            return await call(self.primary)
        except self.errors as e:
            logger.warning(
                "primary adapter failed, reading from secondary",
                operation=operation,
                primary=self.primary.name,
                secondary=self.secondary.name,
                error=str(e),
            )
            return await call(self.secondary)

    async def _write(self, call: Callable[[Adapter], Awaitable[bool]]) -> bool:
        result = await call(self.primary)
        if self.dual_write:
            await call(self.secondary)
        return result
