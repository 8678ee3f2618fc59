"""Abstract contract between trainers and the training engine.

Trainers never look inside the engine: they load datasets, hand over an
``EngineConfig`` and receive a ``ModelHandle`` whose only operations are
metric reads and a single serialize call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class DatasetKind(str, Enum):
    """On-disk dataset layouts the engine can load."""

    LABELED_DIRECTORIES = "labeled_directories"
    ANNOTATED_IMAGES = "annotated_images"
    TABLE = "table"


class EngineTask(str, Enum):
    """Model families the engine can fit."""

    IMAGE_CLASSIFIER = "image_classifier"
    SOUND_CLASSIFIER = "sound_classifier"
    TEXT_CLASSIFIER = "text_classifier"
    TABULAR_CLASSIFIER = "tabular_classifier"
    TABULAR_REGRESSOR = "tabular_regressor"
    OBJECT_DETECTOR = "object_detector"
    WORD_TAGGER = "word_tagger"
    RECOMMENDER = "recommender"


class Split(str, Enum):
    """Which data a metric report describes."""

    TRAINING = "training"
    VALIDATION = "validation"


@dataclass
class DatasetHandle:
    """Opaque reference to a loaded dataset.

    Attributes:
        location: Where the data was loaded from.
        kind: Layout the data was loaded as.
        row_count: Number of examples (rows, files or annotated images).
        columns: Column names for tables; empty for directory layouts.
        payload: Engine-private representation. Trainers must not inspect it.
    """

    location: Path
    kind: DatasetKind
    row_count: int
    columns: list[str] = field(default_factory=list)
    payload: Any = None


@dataclass
class EngineConfig:
    """Engine-facing configuration built from normalized training parameters."""

    task: EngineTask
    options: dict[str, Any] = field(default_factory=dict)
    validation: DatasetHandle | None = None


@dataclass(frozen=True)
class MetricReport:
    """Error figures reported by a fitted model for one split.

    Each field is ``None`` when the task does not produce that figure.
    """

    error_rate: float | None = None
    rmse: float | None = None
    mean_average_precision: float | None = None


class ModelHandle(ABC):
    """A fitted, write-once model produced by ``TrainingEngine.fit``."""

    @abstractmethod
    def metrics(self, split: Split) -> MetricReport | None:
        """Return the metric report for a split.

        ``None`` means the split was not evaluated (no validation data was
        supplied, or the task reports no metrics).
        """
        ...

    def feature_importance(self) -> dict[str, float] | None:
        """Feature importance scores, if the fitted estimator exposes them."""
        return None

    @abstractmethod
    def serialize(self, path: Path, metadata: dict[str, Any]) -> None:
        """Write the model and its metadata to ``path``, replacing any existing file."""
        ...


class TrainingEngine(ABC):
    """Black-box training backend."""

    @abstractmethod
    def load_dataset(self, location: Path, kind: DatasetKind) -> DatasetHandle:
        """Load a dataset from disk.

        Raises:
            DataLoadError: If the data cannot be parsed into the expected shape.
        """
        ...

    @abstractmethod
    def fit(self, dataset: DatasetHandle, config: EngineConfig) -> ModelHandle:
        """Fit a model. Blocks until training completes."""
        ...
