"""Tabular classification and regression trainer."""

from pathlib import Path

from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, EngineTask, ModelHandle
from trainkit.errors import ConfigurationError
from trainkit.trainers.base import BaseTrainer, TrainingSummary
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.metrics import extract_accuracy, extract_rmse
from trainkit.trainers.parameters import TabularModelType, TabularParameters
from trainkit.trainers.results import ClassifierResult, RegressorResult, TrainingResult


@TrainerFactory.register(Modality.TABULAR)
class TabularTrainer(BaseTrainer):
    """Trains a classifier or regressor on a CSV or JSON table.

    ``parameters.model_type`` picks the entry point and the result type:
    ClassifierResult for classifiers, RegressorResult for regressors. The
    selected algorithm decides the estimator that is trained and written.
    """

    modality = Modality.TABULAR
    dataset_kind = DatasetKind.TABLE
    parameters_class = TabularParameters
    result_class = ClassifierResult
    labels_field = None

    def default_parameters(self) -> TabularParameters:
        raise ConfigurationError("Tabular training requires a target column")

    def feature_columns(self, parameters: TabularParameters, dataset: DatasetHandle) -> list[str]:
        """Explicit feature columns, or every dataset column except the target."""
        if parameters.feature_columns:
            return list(parameters.feature_columns)
        return [column for column in dataset.columns if column != parameters.target_column]

    def build_config(
        self,
        parameters: TabularParameters,
        dataset: DatasetHandle,
        validation: DatasetHandle | None,
    ) -> EngineConfig:
        task = (
            EngineTask.TABULAR_REGRESSOR
            if parameters.model_type is TabularModelType.REGRESSOR
            else EngineTask.TABULAR_CLASSIFIER
        )
        return EngineConfig(
            task=task,
            options={
                "target_column": parameters.target_column,
                "feature_columns": self.feature_columns(parameters, dataset),
                "algorithm": parameters.algorithm,
            },
            validation=validation,
        )

    def describe_training(self, parameters: TabularParameters, dataset: DatasetHandle) -> str:
        n_features = len(self.feature_columns(parameters, dataset))
        return (
            f"Training tabular {parameters.model_type.value} ({parameters.algorithm}) "
            f"on {n_features} features..."
        )

    def description_subject(self, parameters: TabularParameters) -> str:
        return f"Tabular {parameters.model_type.value}"

    def result_class_for(self, parameters: TabularParameters) -> type[TrainingResult]:
        if parameters.model_type is TabularModelType.REGRESSOR:
            return RegressorResult
        return ClassifierResult

    def summarize(
        self, model: ModelHandle, dataset_location: Path, parameters: TabularParameters
    ) -> TrainingSummary:
        if parameters.model_type is TabularModelType.REGRESSOR:
            training, validation = extract_rmse(model)
            name = "rmse"
        else:
            training, validation = extract_accuracy(model)
            name = "accuracy"

        return TrainingSummary(
            training={name: training},
            validation={name: validation},
            extra={"feature_importance": model.feature_importance() or {}},
        )
