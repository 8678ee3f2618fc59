"""Word tagging trainer (NER, POS tagging, ...)."""

from pathlib import Path

from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, EngineTask, ModelHandle
from trainkit.trainers.base import BaseTrainer, TrainingSummary
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.labels import tag_labels
from trainkit.trainers.metrics import extract_accuracy
from trainkit.trainers.parameters import WordTaggingParameters
from trainkit.trainers.results import WordTaggerResult


@TrainerFactory.register(Modality.WORD_TAGGING)
class WordTaggerTrainer(BaseTrainer):
    """Trains a word tagger from records holding parallel token and label sequences."""

    modality = Modality.WORD_TAGGING
    dataset_kind = DatasetKind.TABLE
    parameters_class = WordTaggingParameters
    result_class = WordTaggerResult
    labels_field = "tag_labels"

    def build_config(
        self,
        parameters: WordTaggingParameters,
        dataset: DatasetHandle,
        validation: DatasetHandle | None,
    ) -> EngineConfig:
        return EngineConfig(
            task=EngineTask.WORD_TAGGER,
            options={
                "token_column": parameters.token_column,
                "label_column": parameters.label_column,
                "language": parameters.language,
            },
            validation=validation,
        )

    def describe_training(self, parameters: WordTaggingParameters, dataset: DatasetHandle) -> str:
        return "Training word tagger..."

    def summarize(
        self, model: ModelHandle, dataset_location: Path, parameters: WordTaggingParameters
    ) -> TrainingSummary:
        training, validation = extract_accuracy(model)
        return TrainingSummary(
            training={"accuracy": training},
            validation={"accuracy": validation},
            labels=tag_labels(dataset_location, parameters.label_column),
        )
