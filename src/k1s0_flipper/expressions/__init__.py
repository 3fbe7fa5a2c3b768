"""式インタプリタ（ノード・レジストリ・ビルダー）"""

from .base import Constant, EvaluationContext, Expression
from .comparison import (
    Comparable,
    Equal,
    GreaterThan,
    GreaterThanOrEqualTo,
    LessThan,
    LessThanOrEqualTo,
    NotEqual,
)
from .conversion import BooleanExpression, NumberExpression, StringExpression
from .logic import All, Any
from .property import Property
from .registry import DEFAULT_REGISTRY, ExpressionRegistry, build_expression
from .rollout import Percentage, PercentageOfActors, Random, actor_bucket, in_rollout
from .temporal import Duration, Now, Time

__all__ = [
    "All",
    "Any",
    "BooleanExpression",
    "Comparable",
    "Constant",
    "DEFAULT_REGISTRY",
    "Duration",
    "Equal",
    "EvaluationContext",
    "Expression",
    "ExpressionRegistry",
    "GreaterThan",
    "GreaterThanOrEqualTo",
    "LessThan",
    "LessThanOrEqualTo",
    "NotEqual",
    "Now",
    "NumberExpression",
    "Percentage",
    "PercentageOfActors",
    "Property",
    "Random",
    "StringExpression",
    "Time",
    "actor_bucket",
    "build_expression",
    "in_rollout",
]
