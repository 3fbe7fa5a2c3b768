"""乱数・パーセンテージ系のノード"""

from __future__ import annotations

import math
import random
import zlib

from ..coerce import is_number, to_number, to_string
from .base import EvaluationContext, Expression

# 小数のパーセンテージは小数点以下 3 桁まで保持する
SCALING_FACTOR = 1000


def actor_bucket(feature_name: str, actor_id: str) -> int:
    """``feature_name + actor_id`` の CRC32 から ``[0, 100 * SCALING_FACTOR)`` のバケットを求める。

    他の Flipper SDK も同じ文字列を同じ方法でハッシュするため、どのクライアントで
    評価してもアクターは同じバケットに入る。
    """
    return zlib.crc32(f"{feature_name}{actor_id}".encode("utf-8")) % (100 * SCALING_FACTOR)


def in_rollout(feature_name: str, actor_id: str, percentage: int | float) -> bool:
    return actor_bucket(feature_name, actor_id) < percentage * SCALING_FACTOR


class Random(Expression):
    """``[0, max)`` の一様乱数（整数）。max が 1 以下なら 0。"""

    name = "Random"
    min_args = 1
    max_args = 1
    single_value = True

    def evaluate(self, context: EvaluationContext) -> int:
        maximum = to_number(self._evaluate_arg(0, context))
        if not math.isfinite(maximum) or maximum <= 1:
            return 0
        return math.floor(random.random() * maximum)


class Percentage(Expression):
    """``value < percentage`` なら True。"""

    name = "Percentage"
    min_args = 2
    max_args = 2

    def evaluate(self, context: EvaluationContext) -> bool:
        value = to_number(self._evaluate_arg(0, context))
        percentage = to_number(self._evaluate_arg(1, context))
        return value < percentage


class PercentageOfActors(Expression):
    """アクター ID を決定的にパーセンテージへ割り当てるロールアウト。"""

    name = "PercentageOfActors"
    min_args = 2
    max_args = 2

    def evaluate(self, context: EvaluationContext) -> bool:
        text_value = self._evaluate_arg(0, context)
        text = to_string(text_value) if isinstance(text_value, str) or is_number(text_value) else ""
        percentage = to_number(self._evaluate_arg(1, context))
        if not text or percentage == 0 or math.isnan(percentage):
            return False
        return in_rollout(context.feature_name or "", text, percentage)
