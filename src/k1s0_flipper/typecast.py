"""ストレージから読んだ生のゲート値の正規化"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)")


def to_boolean(value: Any) -> bool:
    """``True``、``1``、``"true"``、``"1"`` のときだけ True。"""
    return value is True or value == "true" or value == "1" or (value == 1 and not isinstance(value, bool))


def to_set(value: Any) -> frozenset[str]:
    if isinstance(value, (set, frozenset, list, tuple)):
        return frozenset(str(item) for item in value)
    return frozenset()


def to_number(value: Any) -> int | float:
    """保存されたパーセンテージを数値にする。解析できなければ 0。

    文字列は先頭の数値部分を読むため、他の Flipper クライアントと同じく
    ``"50abc"`` は 50 になる。``.`` を含む文字列は float として読む。
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        if "." in value:
            match = _FLOAT_PREFIX_RE.match(value)
            return float(match.group(1)) if match else 0
        match = _INT_PREFIX_RE.match(value)
        return int(match.group(1)) if match else 0
    return 0


def to_expression(value: Any) -> dict[str, Any] | None:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if isinstance(value, Mapping) and value:
        return dict(value)
    return None


def features_hash(source: Mapping[str, Mapping[str, Any]] | None) -> dict[str, dict[str, Any]]:
    """``{feature: {gate: raw}}`` を正規化し、アダプター間で比較できるようにする。

    シーケンスは文字列の frozenset に、マッピングはそのまま、スカラーは文字列になる。
    """
    normalized: dict[str, dict[str, Any]] = {}
    if not source:
        return normalized
    for feature_key, gates in source.items():
        normalized[feature_key] = {}
        for gate_key, value in (gates or {}).items():
            if isinstance(value, (set, frozenset, list, tuple)):
                value = to_set(value)
            elif isinstance(value, Mapping):
                value = dict(value)
            elif isinstance(value, bool):
                value = "true" if value else "false"
            elif isinstance(value, (str, int, float)):
                value = str(value)
            normalized[feature_key][gate_key] = value
    return normalized
