"""任意個の引数に対する論理 AND / OR"""

from __future__ import annotations

from ..coerce import truthy
from .base import EvaluationContext, Expression


class All(Expression):
    """全引数が truthy なら True。最初の falsy で評価を打ち切る。"""

    name = "All"

    def evaluate(self, context: EvaluationContext) -> bool:
        return all(truthy(arg.evaluate(context)) for arg in self.args)


class Any(Expression):
    """いずれかの引数が truthy なら True。最初の truthy で評価を打ち切る。"""

    name = "Any"

    def evaluate(self, context: EvaluationContext) -> bool:
        return any(truthy(arg.evaluate(context)) for arg in self.args)
