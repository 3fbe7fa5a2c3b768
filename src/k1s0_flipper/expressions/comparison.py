"""比較ノード"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from ..coerce import is_number, strict_equals
from .base import EvaluationContext, Expression


class Comparable(Expression):
    """評価済みの 2 引数を比較する。

    どちらかが ``None`` なら比較はすべて False（``Equal(None, None)`` も含む）。
    大小比較は両辺が数値であることも必要。
    """

    min_args = 2
    max_args = 2

    def evaluate(self, context: EvaluationContext) -> bool:
        left = self._evaluate_arg(0, context)
        right = self._evaluate_arg(1, context)
        if left is None or right is None:
            return False
        return self.compare(left, right)

    @abstractmethod
    def compare(self, left: Any, right: Any) -> bool: ...


class _Ordering(Comparable):
    def compare(self, left: Any, right: Any) -> bool:
        if not (is_number(left) and is_number(right)):
            return False
        return self.order(left, right)

    @abstractmethod
    def order(self, left: int | float, right: int | float) -> bool: ...


class Equal(Comparable):
    name = "Equal"

    def compare(self, left: Any, right: Any) -> bool:
        return strict_equals(left, right)


class NotEqual(Comparable):
    name = "NotEqual"

    def compare(self, left: Any, right: Any) -> bool:
        return not strict_equals(left, right)


class GreaterThan(_Ordering):
    name = "GreaterThan"

    def order(self, left: int | float, right: int | float) -> bool:
        return left > right


class GreaterThanOrEqualTo(_Ordering):
    name = "GreaterThanOrEqualTo"

    def order(self, left: int | float, right: int | float) -> bool:
        return left >= right


class LessThan(_Ordering):
    name = "LessThan"

    def order(self, left: int | float, right: int | float) -> bool:
        return left < right


class LessThanOrEqualTo(_Ordering):
    name = "LessThanOrEqualTo"

    def order(self, left: int | float, right: int | float) -> bool:
        return left <= right
