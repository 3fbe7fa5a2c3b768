"""MemoizableAdapter 実装"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from .base import Adapter, RawGateValues
from .wrapper import Wrapper

if TYPE_CHECKING:
    from ..feature import Feature
    from ..gates import Gate

_FEATURES_KEY = "flipper_features"


def _key_for(feature_key: str) -> str:
    return f"feature/{feature_key}"


class MemoizableAdapter(Wrapper):
    """``memoize`` が有効な間、読み込みをキャッシュする。

    キャッシュは Future を保持するため、同じフィーチャーへの同時読み込みは
    ラップ先への 1 回の問い合わせを共有する。書き込みは対象のキャッシュを破棄し、
    ``memoize`` を無効にするとキャッシュは空になる。
    """

    def __init__(self, adapter: Adapter) -> None:
        super().__init__(adapter)
        self._cache: dict[str, asyncio.Future[Any]] = {}
        self._memoize = False
        self._all_loaded = False

    @property
    def memoize(self) -> bool:
        return self._memoize

    @memoize.setter
    def memoize(self, value: bool) -> None:
        if not value:
            self._cache.clear()
            self._all_loaded = False
        self._memoize = value

    @asynccontextmanager
    async def memoizing(self) -> AsyncIterator[MemoizableAdapter]:
        """ブロックの間（例: 1 リクエスト）だけメモ化する。"""
        previous = self._memoize
        self.memoize = True
        try:
            yield self
        finally:
            self.memoize = previous

    async def features(self) -> set[str]:
        if not self._memoize:
            return await self.adapter.features()
        return set(await self._cached(_FEATURES_KEY, self.adapter.features))

    async def get(self, feature: Feature) -> RawGateValues:
        if not self._memoize:
            return await self.adapter.get(feature)
        return await self._cached(_key_for(feature.key), lambda: self.adapter.get(feature))

    async def get_multi(self, features: list[Feature]) -> dict[str, RawGateValues]:
        if not self._memoize:
            return await self.adapter.get_multi(features)

        uncached = [feature for feature in features if _key_for(feature.key) not in self._cache]
        if uncached:
            response = await self.adapter.get_multi(uncached)
            for feature_key, values in response.items():
                self._store(_key_for(feature_key), values)

        result: dict[str, RawGateValues] = {}
        for feature in features:
            result[feature.key] = await self._cached(_key_for(feature.key), lambda f=feature: self.adapter.get(f))
        return result

    async def get_all(self) -> dict[str, RawGateValues]:
        if not self._memoize:
            return await self.adapter.get_all()

        if self._all_loaded and _FEATURES_KEY in self._cache:
            result: dict[str, RawGateValues] = {}
            for feature_key in await self._cache[_FEATURES_KEY]:
                key = _key_for(feature_key)
                result[feature_key] = await self._cache[key] if key in self._cache else {}
            return result

        response = await self.adapter.get_all()
        for feature_key, values in response.items():
            self._store(_key_for(feature_key), values)
        self._store(_FEATURES_KEY, set(response))
        self._all_loaded = True
        return response

    async def add(self, feature: Feature) -> bool:
        result = await self.adapter.add(feature)
        self._expire(_FEATURES_KEY)
        return result

    async def remove(self, feature: Feature) -> bool:
        result = await self.adapter.remove(feature)
        self._expire(_FEATURES_KEY)
        self._expire(_key_for(feature.key))
        return result

    async def clear(self, feature: Feature) -> bool:
        result = await self.adapter.clear(feature)
        self._expire(_key_for(feature.key))
        return result

    async def enable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        result = await self.adapter.enable(feature, gate, thing)
        self._expire(_key_for(feature.key))
        return result

    async def disable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        result = await self.adapter.disable(feature, gate, thing)
        self._expire(_key_for(feature.key))
        return result

    async def _cached(self, key: str, load: Any) -> Any:
        future = self._cache.get(key)
        if future is None:
            future = asyncio.ensure_future(load())
            self._cache[key] = future
        try:
            return await asyncio.shield(future)
        except Exception:
            if self._cache.get(key) is future:
                del self._cache[key]
            raise

    def _store(self, key: str, value: Any) -> None:
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        future.set_result(value)
        self._cache[key] = future

    def _expire(self, key: str) -> None:
        if self._memoize:
            self._cache.pop(key, None)
            # get_all をキャッシュだけでは返せなくなる
            self._all_loaded = False
