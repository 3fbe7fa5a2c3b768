"""StrictAdapter 実装"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal, Union

import structlog

from ..exceptions import FeatureNotFoundError
from .base import Adapter, RawGateValues
from .wrapper import Wrapper

if TYPE_CHECKING:
    from ..feature import Feature

logger = structlog.get_logger(__name__)

StrictHandler = Union[bool, Literal["raise", "warn", "noop"], Callable[["Feature"], Any]]


class StrictAdapter(Wrapper):
    """追加されていないフィーチャーの読み込みに反応する。

    ``handler`` が ``"raise"``（または ``True``）なら ``FeatureNotFoundError`` を送出、
    ``"warn"`` なら警告ログ、``"noop"``（または ``False``）なら何もしない。
    呼び出し可能オブジェクトならフィーチャーを渡して呼ぶ。
    """

    def __init__(self, adapter: Adapter, handler: StrictHandler = True) -> None:
        super().__init__(adapter)
        self.handler = handler

    async def get(self, feature: Feature) -> RawGateValues:
        await self._assert_feature_exists(feature)
        return await super().get(feature)

    async def get_multi(self, features: list[Feature]) -> dict[str, RawGateValues]:
        for feature in features:
            await self._assert_feature_exists(feature)
        return await super().get_multi(features)

    async def _assert_feature_exists(self, feature: Feature) -> None:
        if feature.key in await self.adapter.features():
            return

        if self.handler is True or self.handler == "raise":
            raise FeatureNotFoundError(feature.name)
        if self.handler == "warn":
            logger.warning(str(FeatureNotFoundError(feature.name)), feature_name=feature.name)
        elif callable(self.handler):
            self.handler(feature)
