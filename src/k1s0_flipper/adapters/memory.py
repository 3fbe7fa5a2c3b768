"""InMemoryAdapter 実装"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from ..exceptions import FlipperError, FlipperErrorCodes
from ..gates import GATE_ORDER, DataType
from .base import Adapter, RawGateValues

if TYPE_CHECKING:
    from ..feature import Feature
    from ..gates import Gate

_JSON_KEYS = frozenset(cls.key for cls in GATE_ORDER if cls.data_type is DataType.JSON)


class InMemoryAdapter(Adapter):
    """テスト・ローカル開発用のインメモリアダプター。"""

    name = "memory"

    def __init__(self) -> None:
        self._store: dict[str, dict[str, Any]] = {}

    async def features(self) -> set[str]:
        return set(self._store)

    async def add(self, feature: Feature) -> bool:
        if feature.key in self._store:
            return False
        self._store[feature.key] = {}
        return True

    async def remove(self, feature: Feature) -> bool:
        self._store.pop(feature.key, None)
        return True

    async def clear(self, feature: Feature) -> bool:
        if feature.key in self._store:
            self._store[feature.key] = {}
        return True

    async def get(self, feature: Feature) -> RawGateValues:
        return self._read(feature.key)

    async def get_multi(self, features: list[Feature]) -> dict[str, RawGateValues]:
        return {feature.key: self._read(feature.key) for feature in features}

    async def get_all(self) -> dict[str, RawGateValues]:
        return {key: self._read(key) for key in self._store}

    async def enable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        gates = self._store.setdefault(feature.key, {})
        if gate.data_type is DataType.BOOLEAN:
            gates[gate.key] = "true"
        elif gate.data_type is DataType.NUMBER:
            gates[gate.key] = str(thing.value)
        elif gate.data_type is DataType.SET:
            gates.setdefault(gate.key, set()).add(str(thing.value))
        elif gate.data_type is DataType.JSON:
            gates[gate.key] = json.dumps(thing.value)
        else:
            raise FlipperError(
                FlipperErrorCodes.INVALID_TYPE,
                f"{gate.name} is not supported by this adapter",
            )
        return True

    async def disable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        gates = self._store.setdefault(feature.key, {})
        if gate.data_type is DataType.BOOLEAN:
            await self.clear(feature)
        elif gate.data_type is DataType.NUMBER:
            gates[gate.key] = str(thing.value)
        elif gate.data_type is DataType.SET:
            gates.get(gate.key, set()).discard(str(thing.value))
        elif gate.data_type is DataType.JSON:
            gates.pop(gate.key, None)
        else:
            raise FlipperError(
                FlipperErrorCodes.INVALID_TYPE,
                f"{gate.name} is not supported by this adapter",
            )
        return True

    def _read(self, key: str) -> RawGateValues:
        values: RawGateValues = {}
        for gate_key, value in self._store.get(key, {}).items():
            if gate_key in _JSON_KEYS:
                values[gate_key] = _decode(value)
            elif isinstance(value, set):
                values[gate_key] = set(value)
            else:
                values[gate_key] = value
        return values


def _decode(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        decoded = json.loads(value)
    except ValueError:
        return None
    return decoded if isinstance(decoded, dict) else None
