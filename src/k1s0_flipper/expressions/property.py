"""プロパティ参照"""

from __future__ import annotations

from typing import Any

from ..coerce import is_number, to_string
from .base import EvaluationContext, Expression


class Property(Expression):
    """アクターの ``flipper_properties`` から値を読み出す。

    存在しないプロパティは例外ではなく ``None`` に評価される。
    """

    name = "Property"
    min_args = 1
    max_args = 1
    single_value = True

    def evaluate(self, context: EvaluationContext) -> Any:
        key_value = self._evaluate_arg(0, context)
        if isinstance(key_value, str) or is_number(key_value):
            key = to_string(key_value)
        else:
            key = ""
        return context.properties.get(key)
