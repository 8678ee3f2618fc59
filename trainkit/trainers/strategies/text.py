"""Text classification trainer."""

from pathlib import Path

from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, EngineTask, ModelHandle
from trainkit.trainers.algorithms import TextAlgorithm
from trainkit.trainers.base import BaseTrainer, TrainingSummary
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.labels import column_labels
from trainkit.trainers.metrics import extract_accuracy
from trainkit.trainers.parameters import TextParameters
from trainkit.trainers.results import TextClassifierResult

ALGORITHM_NAMES = {
    TextAlgorithm.MAX_ENT: "Maximum Entropy",
    TextAlgorithm.TRANSFER_LEARNING: "Transfer Learning",
}


@TrainerFactory.register(Modality.TEXT)
class TextClassifierTrainer(BaseTrainer):
    """Trains a text classifier from a CSV or JSON table of text and label columns."""

    modality = Modality.TEXT
    dataset_kind = DatasetKind.TABLE
    parameters_class = TextParameters
    result_class = TextClassifierResult

    def build_config(
        self,
        parameters: TextParameters,
        dataset: DatasetHandle,
        validation: DatasetHandle | None,
    ) -> EngineConfig:
        return EngineConfig(
            task=EngineTask.TEXT_CLASSIFIER,
            options={
                "algorithm": parameters.algorithm.value,
                "text_column": parameters.text_column,
                "label_column": parameters.label_column,
            },
            validation=validation,
        )

    def describe_training(self, parameters: TextParameters, dataset: DatasetHandle) -> str:
        return f"Training text classifier using {ALGORITHM_NAMES[parameters.algorithm]}..."

    def summarize(
        self, model: ModelHandle, dataset_location: Path, parameters: TextParameters
    ) -> TrainingSummary:
        training, validation = extract_accuracy(model)
        return TrainingSummary(
            training={"accuracy": training},
            validation={"accuracy": validation},
            labels=column_labels(dataset_location, parameters.label_column),
        )
