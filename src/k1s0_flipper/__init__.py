"""k1s0 flipper ライブラリ"""

from .adapters import (
    ActorLimitAdapter,
    Adapter,
    DualWriteAdapter,
    FailoverAdapter,
    FailsafeAdapter,
    InMemoryAdapter,
    InstrumentedAdapter,
    MemoizableAdapter,
    ReadOnlyAdapter,
    StrictAdapter,
    Wrapper,
)
from .config import FlipperConfig, FlipperSection, LogSection, build_adapter, load_config
from .exceptions import (
    ActorLimitExceededError,
    ConfigError,
    FeatureNotFoundError,
    FlipperError,
    FlipperErrorCodes,
    WriteAttemptedError,
)
from .expressions import (
    DEFAULT_REGISTRY,
    EvaluationContext,
    Expression,
    ExpressionRegistry,
    build_expression,
)
from .feature import Feature, FeatureState
from .flipper import Flipper
from .gate_values import FeatureCheckContext, GateValues
from .gates import (
    GATE_ORDER,
    ActorGate,
    BooleanGate,
    DataType,
    ExpressionGate,
    Gate,
    GroupGate,
    PercentageOfActorsGate,
    PercentageOfTimeGate,
)
from .instrumentation import (
    InstrumentationEvent,
    Instrumenter,
    LoggingInstrumenter,
    MemoryInstrumenter,
    NoopInstrumenter,
)
from .logger import configure_logging
from .types import (
    Actor,
    ActorType,
    BooleanType,
    ExpressionType,
    GroupType,
    PercentageOfActorsType,
    PercentageOfTimeType,
)

__all__ = [
    "Actor",
    "ActorGate",
    "ActorLimitAdapter",
    "ActorLimitExceededError",
    "ActorType",
    "Adapter",
    "BooleanGate",
    "BooleanType",
    "ConfigError",
    "DEFAULT_REGISTRY",
    "DataType",
    "DualWriteAdapter",
    "EvaluationContext",
    "Expression",
    "ExpressionGate",
    "ExpressionRegistry",
    "ExpressionType",
    "FailoverAdapter",
    "FailsafeAdapter",
    "Feature",
    "FeatureCheckContext",
    "FeatureNotFoundError",
    "FeatureState",
    "Flipper",
    "FlipperConfig",
    "FlipperError",
    "FlipperErrorCodes",
    "FlipperSection",
    "GATE_ORDER",
    "Gate",
    "GateValues",
    "GroupGate",
    "GroupType",
    "InMemoryAdapter",
    "InstrumentationEvent",
    "InstrumentedAdapter",
    "Instrumenter",
    "LogSection",
    "LoggingInstrumenter",
    "MemoizableAdapter",
    "MemoryInstrumenter",
    "NoopInstrumenter",
    "PercentageOfActorsGate",
    "PercentageOfActorsType",
    "PercentageOfTimeGate",
    "PercentageOfTimeType",
    "ReadOnlyAdapter",
    "StrictAdapter",
    "WriteAttemptedError",
    "Wrapper",
    "build_adapter",
    "build_expression",
    "configure_logging",
    "load_config",
]
