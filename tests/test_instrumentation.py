"""Instrumenter のユニットテスト"""

import pytest
from k1s0_flipper.instrumentation import LoggingInstrumenter, MemoryInstrumenter, NoopInstrumenter


async def test_noop_runs_call() -> None:
    """渡したペイロードで呼び出しが実行される。"""
    payload = {"feature_name": "search"}

    async def call(p: dict) -> int:
        p["result"] = "done"
        return 42

    assert await NoopInstrumenter().instrument("test", payload, call) == 42
    assert payload["result"] == "done"


async def test_noop_propagates_errors() -> None:
    """エラーは握りつぶさない。"""

    async def call(p: dict) -> None:
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await NoopInstrumenter().instrument("test", {}, call)


async def test_memory_records_events() -> None:
    """イベントは名前・ペイロード・結果を保持する。"""
    instrumenter = MemoryInstrumenter()
    payload = {"feature_name": "search"}

    async def call(p: dict) -> str:
        p["result"] = "done"
        return "result"

    assert await instrumenter.instrument("op", payload, call) == "result"
    event = instrumenter.events[0]
    assert event.name == "op"
    assert event.payload == {"feature_name": "search", "result": "done"}
    assert event.result == "result"
    assert "result" not in payload


async def test_memory_records_failures() -> None:
    """失敗した呼び出しは例外とともに記録して再送出する。"""
    instrumenter = MemoryInstrumenter()
    error = RuntimeError("boom")

    async def call(p: dict) -> None:
        raise error

    with pytest.raises(RuntimeError):
        await instrumenter.instrument("op", {}, call)
    event = instrumenter.events[0]
    assert event.payload["exception"] == ("RuntimeError", "boom")
    assert event.payload["exception_object"] is error
    assert event.result is None


async def test_memory_queries_and_reset() -> None:
    """検索ヘルパーとリセット。"""
    instrumenter = MemoryInstrumenter()
    for name, value in (("op1", 1), ("op2", 2), ("op1", 3)):

        async def call(p: dict, value: int = value) -> int:
            return value

        await instrumenter.instrument(name, {}, call)

    assert instrumenter.count() == 3
    assert instrumenter.count("op1") == 2
    assert instrumenter.count("missing") == 0
    assert [event.result for event in instrumenter.events_by_name("op1")] == [1, 3]
    first = instrumenter.event_by_name("op1")
    assert first is not None and first.result == 1
    assert instrumenter.event_by_name("missing") is None
    instrumenter.reset()
    assert instrumenter.events == []


async def test_logging_instrumenter_logs_success(mocker) -> None:
    """成功した呼び出しはペイロードとともに debug で記録する。"""
    logger = mocker.Mock()
    instrumenter = LoggingInstrumenter(logger)

    async def call(p: dict) -> bool:
        p["gate_name"] = "actors"
        return True

    assert await instrumenter.instrument("feature_operation.flipper", {"feature_name": "search"}, call) is True
    logger.debug.assert_called_once()
    args, kwargs = logger.debug.call_args
    assert args == ("feature_operation.flipper",)
    assert kwargs["feature_name"] == "search"
    assert kwargs["gate_name"] == "actors"
    assert kwargs["elapsed_ms"] >= 0


async def test_logging_instrumenter_logs_failure(mocker) -> None:
    """失敗は warning で記録して再送出する。"""
    logger = mocker.Mock()
    instrumenter = LoggingInstrumenter(logger)

    async def call(p: dict) -> None:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await instrumenter.instrument("adapter_operation.flipper", {"event": "x"}, call)
    logger.warning.assert_called_once()
    kwargs = logger.warning.call_args.kwargs
    assert kwargs["error"] == "boom"
    assert kwargs["payload_event"] == "x"
    logger.debug.assert_not_called()
