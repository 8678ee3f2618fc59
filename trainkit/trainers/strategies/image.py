"""Image classification trainer."""

from pathlib import Path

from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, EngineTask, ModelHandle
from trainkit.trainers.base import BaseTrainer, TrainingSummary
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.labels import directory_labels
from trainkit.trainers.metrics import extract_accuracy
from trainkit.trainers.parameters import ImageParameters
from trainkit.trainers.results import ImageClassifierResult


@TrainerFactory.register(Modality.IMAGE)
class ImageClassifierTrainer(BaseTrainer):
    """Trains an image classifier from a directory with one subdirectory per class."""

    modality = Modality.IMAGE
    dataset_kind = DatasetKind.LABELED_DIRECTORIES
    parameters_class = ImageParameters
    result_class = ImageClassifierResult

    def build_config(
        self,
        parameters: ImageParameters,
        dataset: DatasetHandle,
        validation: DatasetHandle | None,
    ) -> EngineConfig:
        return EngineConfig(
            task=EngineTask.IMAGE_CLASSIFIER,
            options={
                "max_iterations": parameters.max_iterations,
                "augmentation": sorted(option.value for option in parameters.augmentation),
            },
            validation=validation,
        )

    def describe_training(self, parameters: ImageParameters, dataset: DatasetHandle) -> str:
        return f"Training image classifier (max {parameters.max_iterations} iterations)..."

    def summarize(
        self, model: ModelHandle, dataset_location: Path, parameters: ImageParameters
    ) -> TrainingSummary:
        training, validation = extract_accuracy(model)
        return TrainingSummary(
            training={"accuracy": training},
            validation={"accuracy": validation},
            labels=directory_labels(dataset_location),
        )
