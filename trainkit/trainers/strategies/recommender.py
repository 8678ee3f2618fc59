"""Recommendation trainer (collaborative filtering)."""

from pathlib import Path

from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, EngineTask, ModelHandle
from trainkit.trainers.base import BaseTrainer, TrainingSummary
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.parameters import RecommenderParameters
from trainkit.trainers.results import RecommenderResult


@TrainerFactory.register(Modality.RECOMMENDATION)
class RecommenderTrainer(BaseTrainer):
    """Trains a recommender from a table of user-item interactions.

    With a rating column the ratings are used as explicit feedback; without
    one every interaction counts as an implicit positive. Neither path
    reports an RMSE.
    """

    modality = Modality.RECOMMENDATION
    dataset_kind = DatasetKind.TABLE
    parameters_class = RecommenderParameters
    result_class = RecommenderResult
    labels_field = None

    def build_config(
        self,
        parameters: RecommenderParameters,
        dataset: DatasetHandle,
        validation: DatasetHandle | None,
    ) -> EngineConfig:
        return EngineConfig(
            task=EngineTask.RECOMMENDER,
            options={
                "user_column": parameters.user_column,
                "item_column": parameters.item_column,
                "rating_column": parameters.rating_column,
                "implicit": parameters.implicit_feedback,
            },
            validation=validation,
        )

    def describe_dataset(self, dataset: DatasetHandle) -> str:
        return f"Found {dataset.row_count} interactions..."

    def describe_training(self, parameters: RecommenderParameters, dataset: DatasetHandle) -> str:
        feedback = "implicit feedback" if parameters.implicit_feedback else "explicit ratings"
        return f"Training recommender model ({feedback})..."

    def summarize(
        self, model: ModelHandle, dataset_location: Path, parameters: RecommenderParameters
    ) -> TrainingSummary:
        return TrainingSummary()
