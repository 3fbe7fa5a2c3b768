"""FailsafeAdapter 実装"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from .base import Adapter
from .wrapper import WRITE_OPERATIONS, Wrapper

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _safe_default(operation: str) -> Any:
    if operation in WRITE_OPERATIONS:
        return False
    if operation == "features":
        return set()
    return {}


class FailsafeAdapter(Wrapper):
    """ラップしたアダプターが失敗したとき、安全側の既定値を返す。

    読み込みは空になり、全フィーチャーが無効として扱われる。書き込みは ``False``。
    捕捉するのは ``errors`` のインスタンスだけで、それ以外は送出する。
    """

    def __init__(
        self,
        adapter: Adapter,
        errors: tuple[type[Exception], ...] = (Exception,),
    ) -> None:
        super().__init__(adapter)
        self.errors = errors

    async def _wrap(self, operation: str, call: Callable[[], Awaitable[T]], **details: Any) -> T:
        try:
            return await call()
        except self.errors as e:
            logger.warning(
                "adapter operation failed, using safe default",
                operation=operation,
                adapter_name=self.name,
                error=str(e),
                **details,
            )
            return _safe_default(operation)
