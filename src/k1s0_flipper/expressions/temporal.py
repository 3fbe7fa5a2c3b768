"""時刻関連のノード。値はすべて Unix 秒"""

from __future__ import annotations

import math
import re
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, ClassVar

from ..coerce import is_number, to_number, to_string
from ..exceptions import FlipperError, FlipperErrorCodes
from .base import EvaluationContext, Expression

_DIGITS_RE = re.compile(r"^\d+$")


def parse_timestamp(value: Any) -> int | float:
    """日付文字列またはミリ秒値を Unix 秒に変換する。

    解析できない値は NaN を返す。オフセットのない日時は UTC として扱う。
    """
    if is_number(value):
        return _from_milliseconds(value)
    text = value.strip() if isinstance(value, str) else ""
    if _DIGITS_RE.match(text):
        try:
            return _from_milliseconds(int(text))
        except ValueError:
            # int() が受け付ける桁数を超えている
            return math.nan
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return math.nan
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return math.floor(parsed.timestamp())


def _from_milliseconds(value: int | float) -> int | float:
    try:
        seconds = value / 1000
    except OverflowError:
        return math.nan
    if not math.isfinite(seconds):
        return math.nan
    return math.floor(seconds)


class Time(Expression):
    """引数を Unix 秒に変換する。解析できなければ NaN。"""

    name = "Time"
    min_args = 1
    max_args = 1
    single_value = True

    def evaluate(self, context: EvaluationContext) -> int | float:
        return parse_timestamp(self._evaluate_arg(0, context))


class Now(Expression):
    """現在の Unix 時刻。呼び出しのたびに評価し直す。"""

    name = "Now"
    max_args = 0

    def evaluate(self, context: EvaluationContext) -> int:
        return math.floor(time.time())

    def equals(self, other: object) -> bool:
        return isinstance(other, Now)


class Duration(Expression):
    """``scalar`` ``unit`` を秒に変換する。例: ``[90, "minutes"]`` は 5400。"""

    name = "Duration"
    min_args = 1
    max_args = 2

    SECONDS_PER: ClassVar[dict[str, int]] = {
        "second": 1,
        "minute": 60,
        "hour": 3600,
        "day": 86400,
        "week": 604800,
        "month": 2629746,  # グレゴリオ暦 1 年の 1/12
        "year": 31556952,  # 365.2425 日
    }

    def evaluate(self, context: EvaluationContext) -> int | float:
        scalar = to_number(self._evaluate_arg(0, context))
        unit_value = self._evaluate_arg(1, context)
        if isinstance(unit_value, str) or is_number(unit_value):
            unit = to_string(unit_value).lower()
        else:
            unit = "second"
        if unit.endswith("s"):
            unit = unit[:-1]

        seconds_per_unit = self.SECONDS_PER.get(unit)
        if seconds_per_unit is None:
            raise FlipperError(
                FlipperErrorCodes.INVALID_DURATION,
                f"Duration unit {unit} must be one of: {', '.join(self.SECONDS_PER)}",
            )
        if math.isnan(scalar):
            raise FlipperError(
                FlipperErrorCodes.INVALID_DURATION,
                f"Duration value must be a number but was {self._evaluate_arg(0, context)!r}",
            )
        return scalar * seconds_per_unit
