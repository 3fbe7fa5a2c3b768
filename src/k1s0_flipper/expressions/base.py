"""式ノードの基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from ..coerce import strict_equals
from ..exceptions import FlipperError, FlipperErrorCodes

Primitive = str | int | float | bool | None


@dataclass(frozen=True)
class EvaluationContext:
    """評価中の式から参照できる入力。"""

    feature_name: str | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)


def is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


class Expression(ABC):
    """式ツリーのノード。

    子ノードは親より先に構築され、以後変更されない。そのため同じツリーを
    複数のスレッドやタスクから同時に評価できる。
    """

    name: ClassVar[str]
    min_args: ClassVar[int] = 0
    max_args: ClassVar[int | None] = None
    # value() で要素 1 個のリストではなく引数そのものを出力する
    single_value: ClassVar[bool] = False

    def __init__(self, *args: Expression | Primitive) -> None:
        self.check_arity(len(args))
        self.args: tuple[Expression, ...] = tuple(_as_expression(arg) for arg in args)

    @classmethod
    def check_arity(cls, count: int) -> None:
        """引数 ``count`` 個でこのノードを構築できなければ例外を送出する。"""
        too_few = count < cls.min_args
        too_many = cls.max_args is not None and count > cls.max_args
        if too_few or too_many:
            if cls.max_args is None:
                expected = f"at least {cls.min_args}"
            elif cls.min_args == cls.max_args:
                expected = str(cls.min_args)
            else:
                expected = f"{cls.min_args} to {cls.max_args}"
            raise FlipperError(
                FlipperErrorCodes.INVALID_EXPRESSION,
                f"{cls.name} expects {expected} argument(s), got {count}",
            )

    @abstractmethod
    def evaluate(self, context: EvaluationContext) -> Any: ...

    def value(self) -> Any:
        """同じツリーを再構築できるオブジェクト表記を返す。"""
        if self.single_value and len(self.args) == 1:
            return {self.name: self.args[0].value()}
        return {self.name: [arg.value() for arg in self.args]}

    def equals(self, other: object) -> bool:
        if type(other) is not type(self):
            return False
        assert isinstance(other, Expression)
        if len(self.args) != len(other.args):
            return False
        return all(mine.equals(theirs) for mine, theirs in zip(self.args, other.args))

    def __eq__(self, other: object) -> bool:
        return self.equals(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value()!r})"

    def _evaluate_arg(self, index: int, context: EvaluationContext) -> Any:
        if index >= len(self.args):
            return None
        return self.args[index].evaluate(context)


class Constant(Expression):
    """文字列・数値・真偽値・null のリテラル。"""

    name = "Constant"
    min_args = 1
    max_args = 1

    def __init__(self, value: Primitive) -> None:
        if not is_primitive(value):
            raise FlipperError(
                FlipperErrorCodes.INVALID_EXPRESSION,
                f"Constant must be a string, number, boolean or null, but was {value!r}",
            )
        self.args = ()
        self.constant = value

    def evaluate(self, context: EvaluationContext) -> Any:
        return self.constant

    def value(self) -> Any:
        return self.constant

    def equals(self, other: object) -> bool:
        if not isinstance(other, Constant):
            return False
        return strict_equals(self.constant, other.constant)

    def __repr__(self) -> str:
        return f"Constant({self.constant!r})"


def _as_expression(arg: Expression | Primitive) -> Expression:
    if isinstance(arg, Expression):
        return arg
    if is_primitive(arg):
        return Constant(arg)
    raise FlipperError(
        FlipperErrorCodes.INVALID_EXPRESSION,
        f"{arg!r} cannot be converted into an expression, use build_expression for object notation",
    )
