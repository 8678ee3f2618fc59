"""Base class for modality trainers."""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

from trainkit.artifacts.writer import build_metadata, write_artifact
from trainkit.engine import default_engine
from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, ModelHandle, TrainingEngine
from trainkit.errors import ConfigurationError, DataLoadError, TrainingError, TrainkitError
from trainkit.logging_config import get_logger
from trainkit.trainers.factory import Modality
from trainkit.trainers.parameters import TrainingParameters
from trainkit.trainers.results import TrainingResult

logger = get_logger()


class ProgressStage(str, Enum):
    """Fixed pipeline checkpoints, in the order they are reported."""

    LOADING_DATA = "loading_data"
    DATA_LOADED = "data_loaded"
    CONFIGURED = "configured"
    TRAINING_STARTED = "training_started"
    SAVING_MODEL = "saving_model"
    MODEL_SAVED = "model_saved"


@dataclass(frozen=True)
class ProgressEvent:
    """A progress notification: the checkpoint reached and a human-readable message."""

    stage: ProgressStage
    message: str


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class TrainingSummary:
    """What a trainer read off a fitted model.

    Attributes:
        training: Training-set metrics keyed by metric name (e.g. ``accuracy``).
        validation: Validation-set metrics; ``None`` values are absent metrics.
        labels: Discovered class or tag labels.
        extra: Additional result fields (e.g. ``feature_importance``).
    """

    training: dict[str, float | None] = field(default_factory=dict)
    validation: dict[str, float | None] = field(default_factory=dict)
    labels: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def result_fields(self, labels_field: str | None) -> dict[str, Any]:
        fields: dict[str, Any] = {f"training_{k}": v for k, v in self.training.items()}
        fields.update({f"validation_{k}": v for k, v in self.validation.items()})
        if labels_field is not None:
            fields[labels_field] = self.labels
        fields.update(self.extra)
        return fields

    def metadata_fields(self) -> dict[str, Any]:
        return {
            "training_metrics": {k: v for k, v in self.training.items() if v is not None},
            "validation_metrics": {k: v for k, v in self.validation.items() if v is not None},
            "labels": self.labels,
        }


class BaseTrainer(ABC):
    """Abstract base class for all modality trainers.

    ``train`` runs the same sequential pipeline for every modality: check
    preconditions, load the dataset (and validation data, if any), build the
    engine configuration, fit, read metrics and labels, then write the
    artifact. Subclasses supply the modality-specific pieces.
    """

    modality: ClassVar[Modality]
    dataset_kind: ClassVar[DatasetKind]
    parameters_class: ClassVar[type[TrainingParameters]]
    result_class: ClassVar[type[TrainingResult]]
    labels_field: ClassVar[str | None] = "class_labels"

    def __init__(self, engine: TrainingEngine | None = None):
        self._engine = engine or default_engine()

    @property
    def engine(self) -> TrainingEngine:
        return self._engine

    @abstractmethod
    def build_config(
        self,
        parameters: TrainingParameters,
        dataset: DatasetHandle,
        validation: DatasetHandle | None,
    ) -> EngineConfig:
        """Translate normalized parameters into the engine's configuration."""
        ...

    @abstractmethod
    def summarize(
        self,
        model: ModelHandle,
        dataset_location: Path,
        parameters: TrainingParameters,
    ) -> TrainingSummary:
        """Read metrics and labels for the result."""
        ...

    def default_parameters(self) -> TrainingParameters:
        return self.parameters_class()

    def check_preconditions(self, dataset_location: Path, parameters: TrainingParameters) -> None:
        """Fail fast on missing prerequisites. Runs before any data is loaded."""

    def describe_dataset(self, dataset: DatasetHandle) -> str:
        return f"Found {dataset.row_count} training examples..."

    def describe_training(self, parameters: TrainingParameters, dataset: DatasetHandle) -> str:
        return f"Training {self.modality.value} model..."

    def description_subject(self, parameters: TrainingParameters) -> str | None:
        """Noun used in the default model description; None keeps the modality's default."""
        return None

    def result_class_for(self, parameters: TrainingParameters) -> type[TrainingResult]:
        return self.result_class

    def train(
        self,
        dataset_location: Path | str,
        output_location: Path | str,
        parameters: TrainingParameters | None = None,
        *,
        author: str | None = None,
        description: str | None = None,
        progress: ProgressCallback | None = None,
    ) -> TrainingResult:
        """Train a model and write it to ``output_location``.

        Args:
            dataset_location: Training data (directory or table file). Its
                existence is checked by the caller.
            output_location: Where to write the model file.
            parameters: Normalized parameters. Defaults to the modality's defaults.
            author: Model author metadata.
            description: Model description metadata.
            progress: Optional callback notified at each ProgressStage.

        Returns:
            The modality's TrainingResult.

        Raises:
            ConfigurationError: Parameters are missing or of the wrong modality.
            PreconditionError: A checkable prerequisite is absent.
            DataLoadError: The dataset cannot be loaded.
            TrainingError: The fit call failed.
            ArtifactWriteError: The model could not be written.
        """
        dataset_location = Path(dataset_location)
        output_location = Path(output_location)
        parameters = parameters if parameters is not None else self.default_parameters()

        if not isinstance(parameters, self.parameters_class):
            raise ConfigurationError(
                f"{type(self).__name__} expects {self.parameters_class.__name__}, "
                f"got {type(parameters).__name__}"
            )

        start_time = time.perf_counter()
        log = logger.bind(modality=self.modality.value, dataset=str(dataset_location))

        self.check_preconditions(dataset_location, parameters)

        _notify(progress, ProgressStage.LOADING_DATA, f"Loading training data from {dataset_location}...")
        dataset = self._load(dataset_location)
        validation = None
        if parameters.validation_data is not None:
            validation = self._load(parameters.validation_data)
        log.info("Dataset loaded", rows=dataset.row_count, validation=validation is not None)
        _notify(progress, ProgressStage.DATA_LOADED, self.describe_dataset(dataset))

        config = self.build_config(parameters, dataset, validation)
        _notify(progress, ProgressStage.CONFIGURED, "Configuring training parameters...")

        _notify(progress, ProgressStage.TRAINING_STARTED, self.describe_training(parameters, dataset))
        log.info("Fit started", task=config.task.value)
        model = self._fit(dataset, config)
        log.info("Fit finished", seconds=round(time.perf_counter() - start_time, 3))

        summary = self.summarize(model, dataset_location, parameters)
        if validation is None:
            # No validation data, no validation figure.
            summary.validation = {name: None for name in summary.validation}

        _notify(progress, ProgressStage.SAVING_MODEL, f"Saving model to {output_location}...")
        metadata = build_metadata(
            self.modality,
            author=author,
            description=description,
            subject=self.description_subject(parameters),
            parameters=parameters.model_dump(mode="json"),
            **summary.metadata_fields(),
        )
        write_artifact(model, output_location, metadata)
        _notify(progress, ProgressStage.MODEL_SAVED, f"Model saved to {output_location}")

        return self.result_class_for(parameters)(
            model_path=output_location,
            training_duration=time.perf_counter() - start_time,
            **summary.result_fields(self.labels_field),
        )

    def _load(self, location: Path) -> DatasetHandle:
        try:
            return self._engine.load_dataset(Path(location), self.dataset_kind)
        except TrainkitError:
            raise
        except Exception as exc:
            logger.error("Dataset load failed", location=str(location), error=str(exc))
            raise DataLoadError(f"Could not load data from {location}: {exc}") from exc

    def _fit(self, dataset: DatasetHandle, config: EngineConfig) -> ModelHandle:
        try:
            return self._engine.fit(dataset, config)
        except TrainkitError:
            raise
        except Exception as exc:
            logger.error("Fit failed", task=config.task.value, error=str(exc))
            raise TrainingError(f"Training failed: {exc}") from exc


def _notify(progress: ProgressCallback | None, stage: ProgressStage, message: str) -> None:
    if progress is not None:
        progress(ProgressEvent(stage, message))
