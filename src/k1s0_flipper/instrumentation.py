"""フィーチャー・アダプター操作を計装する Instrumenter"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

import structlog

T = TypeVar("T")

Payload = dict[str, Any]
InstrumentedCall = Callable[[Payload], Awaitable[T]]

FEATURE_OPERATION = "feature_operation.flipper"
ADAPTER_OPERATION = "adapter_operation.flipper"


class Instrumenter(Protocol):
    """``fn`` をペイロード付きで実行し、その呼び出しを観測する。"""

    async def instrument(self, name: str, payload: Payload, fn: InstrumentedCall[T]) -> T: ...


class NoopInstrumenter:
    """呼び出しを実行するだけの Instrumenter。"""

    async def instrument(self, name: str, payload: Payload, fn: InstrumentedCall[T]) -> T:
        return await fn(payload)


@dataclass
class InstrumentationEvent:
    name: str
    payload: Payload
    result: Any = None


class MemoryInstrumenter:
    """全イベントを記録する。テスト用。"""

    def __init__(self) -> None:
        self.events: list[InstrumentationEvent] = []

    async def instrument(self, name: str, payload: Payload, fn: InstrumentedCall[T]) -> T:
        payload = dict(payload)
        try:
            result = await fn(payload)
        except Exception as e:
            payload["exception"] = (type(e).__name__, str(e))
            payload["exception_object"] = e
            self.events.append(InstrumentationEvent(name, payload))
            raise
        self.events.append(InstrumentationEvent(name, payload, result))
        return result

    def events_by_name(self, name: str) -> list[InstrumentationEvent]:
        return [event for event in self.events if event.name == name]

    def event_by_name(self, name: str) -> InstrumentationEvent | None:
        return next((event for event in self.events if event.name == name), None)

    def count(self, name: str | None = None) -> int:
        if name is None:
            return len(self.events)
        return len(self.events_by_name(name))

    def reset(self) -> None:
        self.events.clear()


class LoggingInstrumenter:
    """各イベントを所要時間とともに structlog で出力する。

    成功は debug、失敗は warning で記録してから例外を再送出する。
    """

    def __init__(self, logger: Any = None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    async def instrument(self, name: str, payload: Payload, fn: InstrumentedCall[T]) -> T:
        started = time.perf_counter()
        try:
            result = await fn(payload)
        except Exception as e:
            self._logger.warning(
                name,
                elapsed_ms=_elapsed_ms(started),
                error=str(e),
                **_loggable(payload),
            )
            raise
        self._logger.debug(name, elapsed_ms=_elapsed_ms(started), **_loggable(payload))
        return result


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


def _loggable(payload: Payload) -> Payload:
    # "event" は structlog がメッセージ用に予約している
    return {("payload_event" if key == "event" else key): value for key, value in payload.items()}
