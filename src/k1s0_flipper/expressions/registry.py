"""式レジストリとビルダー"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from ..exceptions import FlipperError, FlipperErrorCodes
from .base import Constant, Expression, is_primitive
from .comparison import (
    Equal,
    GreaterThan,
    GreaterThanOrEqualTo,
    LessThan,
    LessThanOrEqualTo,
    NotEqual,
)
from .conversion import BooleanExpression, NumberExpression, StringExpression
from .logic import All, Any as AnyExpression
from .property import Property
from .rollout import Percentage, PercentageOfActors, Random
from .temporal import Duration, Now, Time


class ExpressionRegistry(Mapping[str, type[Expression]]):
    """ノード名からノードクラスへの読み取り専用テーブル。

    構築後は変更できない。``extend`` は新しいレジストリを返すため、
    カスタムノードが他の呼び出し元に漏れることはない。
    """

    def __init__(self, classes: Mapping[str, type[Expression]]) -> None:
        self._classes = MappingProxyType(dict(classes))

    def __getitem__(self, name: str) -> type[Expression]:
        return self._classes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def extend(self, *classes: type[Expression]) -> ExpressionRegistry:
        """``classes`` をそれぞれの ``name`` で追加した新しいレジストリを返す。"""
        merged = dict(self._classes)
        for cls in classes:
            merged[cls.name] = cls
        return ExpressionRegistry(merged)


DEFAULT_REGISTRY = ExpressionRegistry(
    {
        cls.name: cls
        for cls in (
            All,
            AnyExpression,
            BooleanExpression,
            Constant,
            Duration,
            Equal,
            GreaterThan,
            GreaterThanOrEqualTo,
            LessThan,
            LessThanOrEqualTo,
            NotEqual,
            Now,
            NumberExpression,
            Percentage,
            PercentageOfActors,
            Property,
            Random,
            StringExpression,
            Time,
        )
    }
)


def parse_node(literal: Mapping[str, Any], registry: ExpressionRegistry) -> tuple[type[Expression], list[Any]]:
    """``{Name: args}`` をノードクラスと生の引数リストに解決する。

    子ノードを構築する前にノード名と引数の個数を検証する。
    """
    if len(literal) != 1:
        raise FlipperError(
            FlipperErrorCodes.INVALID_EXPRESSION,
            f"Expression object must have exactly one key, got {sorted(literal)!r}",
        )
    name, args = next(iter(literal.items()))
    cls = registry.get(name)
    if cls is None:
        raise FlipperError(
            FlipperErrorCodes.UNKNOWN_EXPRESSION,
            f"Unknown expression type: {name}",
        )
    raw_args = list(args) if isinstance(args, (list, tuple)) else [args]
    cls.check_arity(len(raw_args))
    return cls, raw_args


def build_expression(literal: Any, registry: ExpressionRegistry | None = None) -> Expression:
    """オブジェクト表記から式ツリーを構築する。

    既存のノード（そのまま返す）、``{"Equal": [{"Property": "plan"}, "enterprise"]}``
    のようなキー 1 個のマッピング、または ``Constant`` になるプリミティブを受け付ける。
    """
    if registry is None:
        registry = DEFAULT_REGISTRY
    if isinstance(literal, Expression):
        return literal
    if isinstance(literal, Mapping):
        cls, raw_args = parse_node(literal, registry)
        if cls is Constant:
            return Constant(raw_args[0])
        return cls(*(build_expression(arg, registry) for arg in raw_args))
    if is_primitive(literal):
        return Constant(literal)
    raise FlipperError(
        FlipperErrorCodes.INVALID_EXPRESSION,
        f"{literal!r} cannot be converted into an expression",
    )
