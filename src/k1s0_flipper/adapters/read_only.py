"""ReadOnlyAdapter 実装"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ..exceptions import WriteAttemptedError
from .wrapper import WRITE_OPERATIONS, Wrapper

T = TypeVar("T")


class ReadOnlyAdapter(Wrapper):
    """書き込みをすべて ``WriteAttemptedError`` で拒否する。"""

    def read_only(self) -> bool:
        return True

    async def _wrap(self, operation: str, call: Callable[[], Awaitable[T]], **details: Any) -> T:
        if operation in WRITE_OPERATIONS:
            raise WriteAttemptedError()
        return await call()
