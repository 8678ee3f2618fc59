"""Immutable result records returned by trainers."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TrainingResult(BaseModel):
    """Fields shared by every modality's result.

    Optional metrics are ``None`` when absent. ``to_payload`` drops them, so
    a missing validation figure never shows up as ``null`` or ``0``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    model_path: Path
    training_duration: float = Field(alias="trainingDurationSeconds")

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and absent metrics omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AccuracyResult(TrainingResult):
    training_accuracy: float
    validation_accuracy: float | None = None


class LabeledClassifierResult(AccuracyResult):
    class_labels: list[str] = Field(default_factory=list)


class ImageClassifierResult(LabeledClassifierResult):
    pass


class SoundClassifierResult(LabeledClassifierResult):
    pass


class TextClassifierResult(LabeledClassifierResult):
    pass


class ClassifierResult(AccuracyResult):
    """Tabular classifier result."""

    feature_importance: dict[str, float] = Field(default_factory=dict)


class RegressorResult(TrainingResult):
    """Tabular regressor result."""

    training_rmse: float = Field(alias="trainingRMSE")
    validation_rmse: float | None = Field(default=None, alias="validationRMSE")
    feature_importance: dict[str, float] = Field(default_factory=dict)


class ObjectDetectorResult(TrainingResult):
    """Object detector result. mAP is measured at IoU 0.5."""

    training_map: float = Field(alias="trainingMAP")
    validation_map: float | None = Field(default=None, alias="validationMAP")
    class_labels: list[str] = Field(default_factory=list)


class WordTaggerResult(AccuracyResult):
    tag_labels: list[str] = Field(default_factory=list)


class RecommenderResult(TrainingResult):
    """Recommender result. The collaborative-filtering fit reports no error metric."""

    training_rmse: float | None = Field(default=None, alias="trainingRMSE")
    validation_rmse: float | None = Field(default=None, alias="validationRMSE")
