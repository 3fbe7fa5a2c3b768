"""JavaScript 互換の値変換

式は SDK 間で共有するワイヤフォーマットのため、何を truthy とみなすか、文字列を
どう数値にするか、いつ 2 値を等しいとするかを JavaScript / Ruby クライアントと
一致させる必要がある。Python 自身の規則は何か所かで異なる（``[]`` は falsy、
``True == 1``、``float("inf")`` が解析できる）。そのため式ノードは ``bool()``、
``float()``、``==`` ではなく以下のヘルパーを使う。
"""

from __future__ import annotations

import math
import re
from typing import Any

_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INFINITY_RE = re.compile(r"^[+-]?Infinity$")
_RADIX_PREFIXES = {"0x": 16, "0o": 8, "0b": 2}


def is_number(value: Any) -> bool:
    """int / float なら True。真偽値は数値として扱わない。"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def truthy(value: Any) -> bool:
    """JavaScript の truthy 判定。

    ``None``、``False``、``0``、``NaN``、``""`` は falsy。空のリストや dict を含め、
    それ以外はすべて truthy。
    """
    if value is None or value is False:
        return False
    if value is True:
        return True
    if is_number(value):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return len(value) > 0
    return True


def _parse_number(text: str) -> int | float:
    text = text.strip()
    if text == "":
        return 0
    if _INFINITY_RE.match(text):
        return -math.inf if text.startswith("-") else math.inf
    prefix = text[:2].lower()
    if prefix in _RADIX_PREFIXES:
        try:
            return int(text[2:], _RADIX_PREFIXES[prefix])
        except ValueError:
            return math.nan
    if not _DECIMAL_RE.match(text):
        return math.nan
    try:
        return int(text)
    except ValueError:
        return float(text)


def to_number(value: Any) -> int | float:
    """JavaScript の ``Number()``。``None`` は 0 として扱う。"""
    if value is None or value is False:
        return 0
    if value is True:
        return 1
    if is_number(value):
        return value
    if isinstance(value, str):
        return _parse_number(value)
    if isinstance(value, (list, tuple)):
        return _parse_number(to_string(value))
    return math.nan


def _format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "-Infinity" if value < 0 else "Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def to_string(value: Any) -> str:
    """プリミティブとリストに対する JavaScript の ``String()``。"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return _format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join(to_string(item) for item in value)
    return str(value)


def strict_equals(left: Any, right: Any) -> bool:
    """JavaScript の ``===``。同じ型かつ同じ値、オブジェクトは同一性で比較する。"""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if is_number(left) and is_number(right):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return left is right
