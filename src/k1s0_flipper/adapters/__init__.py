"""ストレージアダプターとアダプターラッパー"""

from .actor_limit import DEFAULT_ACTOR_LIMIT, ActorLimitAdapter
from .base import Adapter, RawGateValues
from .dual_write import DualWriteAdapter
from .failover import FailoverAdapter
from .failsafe import FailsafeAdapter
from .instrumented import InstrumentedAdapter
from .memoizable import MemoizableAdapter
from .memory import InMemoryAdapter
from .read_only import ReadOnlyAdapter
from .strict import StrictAdapter, StrictHandler
from .wrapper import WRITE_OPERATIONS, Wrapper

__all__ = [
    "DEFAULT_ACTOR_LIMIT",
    "WRITE_OPERATIONS",
    "ActorLimitAdapter",
    "Adapter",
    "DualWriteAdapter",
    "FailoverAdapter",
    "FailsafeAdapter",
    "InMemoryAdapter",
    "InstrumentedAdapter",
    "MemoizableAdapter",
    "RawGateValues",
    "ReadOnlyAdapter",
    "StrictAdapter",
    "StrictHandler",
    "Wrapper",
]
