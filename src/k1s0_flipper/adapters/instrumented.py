"""InstrumentedAdapter 実装"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ..instrumentation import ADAPTER_OPERATION, Instrumenter, NoopInstrumenter, Payload
from .base import Adapter
from .wrapper import Wrapper

T = TypeVar("T")


class InstrumentedAdapter(Wrapper):
    """各操作を ``adapter_operation.flipper`` として Instrumenter に通知する。"""

    def __init__(self, adapter: Adapter, instrumenter: Instrumenter | None = None) -> None:
        super().__init__(adapter)
        self.instrumenter: Instrumenter = instrumenter or NoopInstrumenter()

    async def _wrap(self, operation: str, call: Callable[[], Awaitable[T]], **details: Any) -> T:
        async def run(payload: Payload) -> T:
            result = await call()
            payload["result"] = result
            return result

        payload: Payload = {"operation": operation, "adapter_name": self.adapter.name, **details}
        return await self.instrumenter.instrument(ADAPTER_OPERATION, payload, run)
