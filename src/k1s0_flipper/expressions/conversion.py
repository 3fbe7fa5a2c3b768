"""型変換ノード"""

from __future__ import annotations

import math

from ..coerce import is_number, to_number, to_string, truthy
from .base import EvaluationContext, Expression


class _Conversion(Expression):
    min_args = 1
    max_args = 1
    single_value = True


class BooleanExpression(_Conversion):
    name = "Boolean"

    def evaluate(self, context: EvaluationContext) -> bool:
        return truthy(self._evaluate_arg(0, context))


class NumberExpression(_Conversion):
    """数値変換。数値でない入力は NaN ではなく 0 になる。"""

    name = "Number"

    def evaluate(self, context: EvaluationContext) -> int | float:
        number = to_number(self._evaluate_arg(0, context))
        return 0 if math.isnan(number) else number


class StringExpression(_Conversion):
    name = "String"

    def evaluate(self, context: EvaluationContext) -> str:
        value = self._evaluate_arg(0, context)
        if isinstance(value, (str, bool)) or is_number(value):
            return to_string(value)
        return ""
