"""ActorLimitAdapter 実装"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import typecast
from ..exceptions import ActorLimitExceededError
from ..gates import ActorGate
from .base import Adapter
from .wrapper import Wrapper

if TYPE_CHECKING:
    from ..feature import Feature
    from ..gates import Gate

DEFAULT_ACTOR_LIMIT = 100


class ActorLimitAdapter(Wrapper):
    """1 フィーチャーあたりのアクター数に上限を設ける。"""

    def __init__(self, adapter: Adapter, limit: int = DEFAULT_ACTOR_LIMIT) -> None:
        super().__init__(adapter)
        self.limit = limit

    async def enable(self, feature: Feature, gate: Gate, thing: Any) -> bool:
        if isinstance(gate, ActorGate) and await self._over_limit(feature):
            raise ActorLimitExceededError(feature.name, self.limit)
        return await super().enable(feature, gate, thing)

    async def _over_limit(self, feature: Feature) -> bool:
        values = await self.adapter.get(feature)
        return len(typecast.to_set(values.get(ActorGate.key))) >= self.limit
