"""Flipper エントリポイント（アダプター・グループ・フィーチャーを保持）"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from typing import Any

from .adapters import Adapter, MemoizableAdapter
from .config import FlipperConfig, build_adapter
from .expressions import DEFAULT_REGISTRY, Constant, Expression, ExpressionRegistry, build_expression
from .feature import Feature
from .instrumentation import Instrumenter, LoggingInstrumenter, NoopInstrumenter
from .logger import configure_logging
from .types import GroupPredicate, GroupType


class Flipper:
    """1 つのアダプターを使うフィーチャーフラグ。

    使用例:
        flipper = Flipper(InMemoryAdapter())
        await flipper.enable_actor("search", Actor("User;1"))
        await flipper.is_enabled("search", Actor("User;1"))
    """

    def __init__(
        self,
        adapter: Adapter,
        instrumenter: Instrumenter | None = None,
        registry: ExpressionRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self.adapter = adapter
        self.instrumenter: Instrumenter = instrumenter or NoopInstrumenter()
        self.registry = registry
        self.groups: dict[str, GroupType] = {}
        self._features: dict[str, Feature] = {}

    @classmethod
    def from_config(
        cls,
        adapter: Adapter,
        config: FlipperConfig,
        registry: ExpressionRegistry = DEFAULT_REGISTRY,
    ) -> Flipper:
        """ログを設定し、``config`` に従って ``adapter`` をラップする。"""
        configure_logging(config.log.level, config.log.format)
        instrumenter: Instrumenter | None = LoggingInstrumenter() if config.flipper.instrument else None
        return cls(build_adapter(adapter, config, instrumenter), instrumenter, registry)

    def feature(self, name: str) -> Feature:
        feature = self._features.get(name)
        if feature is None:
            feature = Feature(name, self.adapter, self.groups, self.instrumenter, self.registry)
            self._features[name] = feature
        return feature

    get = feature

    def __getitem__(self, name: str) -> Feature:
        return self.feature(name)

    async def features(self) -> list[Feature]:
        return [self.feature(key) for key in sorted(await self.adapter.features())]

    async def preload(self, names: Iterable[str]) -> list[Feature]:
        """複数フィーチャーを 1 回のアダプター呼び出しで読み込む。メモ化キャッシュも埋まる。"""
        features = [self.feature(name) for name in names]
        await self.adapter.get_multi(features)
        return features

    async def preload_all(self) -> list[Feature]:
        return [self.feature(key) for key in await self.adapter.get_all()]

    def read_only(self) -> bool:
        return self.adapter.read_only()

    @asynccontextmanager
    async def memoizing(self) -> AsyncIterator[Flipper]:
        """メモ化アダプターがあればブロック内のアダプター読み込みをメモ化する。"""
        memoizable = _find_memoizable(self.adapter)
        if memoizable is None:
            yield self
            return
        async with memoizable.memoizing():
            yield self

    # フィーチャー操作のショートカット

    async def is_enabled(self, name: str, thing: Any = None) -> bool:
        return await self.feature(name).is_enabled(thing)

    async def enable(self, name: str, thing: Any = None) -> bool:
        return await self.feature(name).enable(thing)

    async def enable_actor(self, name: str, actor: Any) -> bool:
        return await self.feature(name).enable_actor(actor)

    async def enable_group(self, name: str, group_name: str) -> bool:
        return await self.feature(name).enable_group(group_name)

    async def enable_percentage_of_actors(self, name: str, percentage: int | float) -> bool:
        return await self.feature(name).enable_percentage_of_actors(percentage)

    async def enable_percentage_of_time(self, name: str, percentage: int | float) -> bool:
        return await self.feature(name).enable_percentage_of_time(percentage)

    async def enable_expression(self, name: str, expression: Expression | Mapping[str, Any]) -> bool:
        return await self.feature(name).enable_expression(expression)

    async def disable(self, name: str, thing: Any = None) -> bool:
        return await self.feature(name).disable(thing)

    async def disable_actor(self, name: str, actor: Any) -> bool:
        return await self.feature(name).disable_actor(actor)

    async def disable_group(self, name: str, group_name: str) -> bool:
        return await self.feature(name).disable_group(group_name)

    async def disable_percentage_of_actors(self, name: str) -> bool:
        return await self.feature(name).disable_percentage_of_actors()

    async def disable_percentage_of_time(self, name: str) -> bool:
        return await self.feature(name).disable_percentage_of_time()

    async def disable_expression(self, name: str) -> bool:
        return await self.feature(name).disable_expression()

    async def add(self, name: str) -> bool:
        return await self.feature(name).add()

    async def exist(self, name: str) -> bool:
        return await self.feature(name).exist()

    async def remove(self, name: str) -> bool:
        return await self.feature(name).remove()

    # グループ

    def register(self, name: str, predicate: GroupPredicate) -> GroupType:
        group = GroupType(name, predicate)
        self.groups[name] = group
        return group

    def group(self, name: str) -> GroupType | None:
        return self.groups.get(name)

    def group_names(self) -> set[str]:
        return set(self.groups)

    def group_exists(self, name: str) -> bool:
        return name in self.groups

    def unregister_groups(self) -> None:
        # フィーチャーと共有しているため同じ dict をクリアする
        self.groups.clear()

    # 式ヘルパー。組み込み関数名を上で隠さないよう最後に置く

    @staticmethod
    def build(literal: Any, registry: ExpressionRegistry | None = None) -> Expression:
        return build_expression(literal, registry)

    @staticmethod
    def constant(value: Any) -> Constant:
        return Constant(value)

    @staticmethod
    def property(name: Any) -> Expression:
        return build_expression({"Property": name})

    @staticmethod
    def any(*args: Any) -> Expression:
        return build_expression({"Any": list(args)})

    @staticmethod
    def all(*args: Any) -> Expression:
        return build_expression({"All": list(args)})

    @staticmethod
    def string(value: Any) -> Expression:
        return build_expression({"String": value})

    @staticmethod
    def number(value: Any) -> Expression:
        return build_expression({"Number": value})

    @staticmethod
    def boolean(value: Any) -> Expression:
        return build_expression({"Boolean": value})

    @staticmethod
    def random(maximum: Any) -> Expression:
        return build_expression({"Random": maximum})

    @staticmethod
    def now() -> Expression:
        return build_expression({"Now": []})

    @staticmethod
    def time(value: Any) -> Expression:
        return build_expression({"Time": value})

    @staticmethod
    def duration(scalar: Any, unit: str = "second") -> Expression:
        return build_expression({"Duration": [scalar, unit]})


def _find_memoizable(adapter: Adapter) -> MemoizableAdapter | None:
    current: Any = adapter
    while current is not None:
        if isinstance(current, MemoizableAdapter):
            return current
        current = getattr(current, "adapter", None)
    return None
