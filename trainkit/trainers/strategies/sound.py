"""Sound classification trainer."""

from pathlib import Path

from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, EngineTask, ModelHandle
from trainkit.trainers.base import BaseTrainer, TrainingSummary
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.labels import directory_labels
from trainkit.trainers.metrics import extract_accuracy
from trainkit.trainers.parameters import SoundParameters
from trainkit.trainers.results import SoundClassifierResult


@TrainerFactory.register(Modality.SOUND)
class SoundClassifierTrainer(BaseTrainer):
    """Trains a sound classifier from a directory of labeled audio subdirectories.

    Audio is analysed in fixed-length windows; ``overlap_factor`` controls
    how much consecutive windows overlap.
    """

    modality = Modality.SOUND
    dataset_kind = DatasetKind.LABELED_DIRECTORIES
    parameters_class = SoundParameters
    result_class = SoundClassifierResult

    def build_config(
        self,
        parameters: SoundParameters,
        dataset: DatasetHandle,
        validation: DatasetHandle | None,
    ) -> EngineConfig:
        return EngineConfig(
            task=EngineTask.SOUND_CLASSIFIER,
            options={"overlap_factor": parameters.overlap_factor},
            validation=validation,
        )

    def describe_training(self, parameters: SoundParameters, dataset: DatasetHandle) -> str:
        return "Training sound classifier..."

    def summarize(
        self, model: ModelHandle, dataset_location: Path, parameters: SoundParameters
    ) -> TrainingSummary:
        training, validation = extract_accuracy(model)
        return TrainingSummary(
            training={"accuracy": training},
            validation={"accuracy": validation},
            labels=directory_labels(dataset_location),
        )
