"""Training engine contract and adapters."""

from trainkit.engine.base import (
    DatasetHandle,
    DatasetKind,
    EngineConfig,
    EngineTask,
    MetricReport,
    ModelHandle,
    Split,
    TrainingEngine,
)

__all__ = [
    "DatasetHandle",
    "DatasetKind",
    "EngineConfig",
    "EngineTask",
    "MetricReport",
    "ModelHandle",
    "Split",
    "TrainingEngine",
]


def default_engine() -> TrainingEngine:
    """Return the engine used when a trainer is not given one."""
    from trainkit.engine.sklearn import SklearnEngine

    return SklearnEngine()
