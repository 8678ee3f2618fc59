"""Typed, fully-defaulted training parameters for each modality.

``normalize_parameters`` turns raw option values (strings, numbers or
``None``) into one of the frozen records below. ``None`` always means "use
the default". Invalid or missing required values raise ConfigurationError
before anything touches the engine.
"""

from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator

from trainkit.errors import ConfigurationError
from trainkit.trainers.algorithms import (
    Algorithm,
    TextAlgorithm,
    select_algorithm,
    select_text_algorithm,
)
from trainkit.trainers.factory import Modality

ColumnName = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]


class AugmentationOption(str, Enum):
    """Image augmentations the engine may apply while training."""

    CROP = "crop"
    ROTATION = "rotation"
    BLUR = "blur"
    EXPOSURE = "exposure"
    NOISE = "noise"
    FLIP = "flip"


DEFAULT_AUGMENTATION: frozenset[AugmentationOption] = frozenset(AugmentationOption)


class TabularModelType(str, Enum):
    """Whether a tabular run predicts a class or a number."""

    CLASSIFIER = "classifier"
    REGRESSOR = "regressor"


class TrainingParameters(BaseModel):
    """Base for every modality's parameter record."""

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    validation_data: Path | None = None


class ImageParameters(TrainingParameters):
    max_iterations: PositiveInt = 25
    augmentation: frozenset[AugmentationOption] = DEFAULT_AUGMENTATION

    @field_validator("augmentation", mode="before")
    @classmethod
    def _coerce_augmentation(cls, value: Any) -> Any:
        # True/False toggles the full default set
        if isinstance(value, bool):
            return DEFAULT_AUGMENTATION if value else frozenset()
        if isinstance(value, str):
            return frozenset(part.strip().lower() for part in value.split(",") if part.strip())
        return value


class TextParameters(TrainingParameters):
    algorithm: TextAlgorithm = TextAlgorithm.MAX_ENT
    text_column: ColumnName = "text"
    label_column: ColumnName = "label"

    @field_validator("algorithm", mode="before")
    @classmethod
    def _select_algorithm(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, TextAlgorithm):
            return select_text_algorithm(value)
        return value


class SoundParameters(TrainingParameters):
    overlap_factor: Annotated[float, Field(ge=0.0, lt=1.0)] = 0.5


class TabularParameters(TrainingParameters):
    target_column: ColumnName
    feature_columns: list[ColumnName] | None = None
    algorithm: Algorithm = Algorithm()
    model_type: TabularModelType = TabularModelType.CLASSIFIER

    @field_validator("algorithm", mode="before")
    @classmethod
    def _select_algorithm(cls, value: Any) -> Any:
        if isinstance(value, str):
            return select_algorithm(value)
        return value

    @field_validator("model_type", mode="before")
    @classmethod
    def _coerce_model_type(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, TabularModelType):
            if value.strip().lower() in {"regressor", "regression"}:
                return TabularModelType.REGRESSOR
            return TabularModelType.CLASSIFIER
        return value

    @model_validator(mode="after")
    def _target_not_a_feature(self) -> "TabularParameters":
        if self.feature_columns and self.target_column in self.feature_columns:
            raise ValueError(f"target column '{self.target_column}' cannot also be a feature column")
        return self


class ObjectDetectionParameters(TrainingParameters):
    max_iterations: PositiveInt = 500
    batch_size: PositiveInt = 8


class WordTaggingParameters(TrainingParameters):
    token_column: ColumnName = "tokens"
    label_column: ColumnName = "labels"
    language: str | None = None


class RecommenderParameters(TrainingParameters):
    """Collaborative-filtering parameters.

    Without a ``rating_column`` the interactions are treated as implicit
    feedback (every user/item pair counts as a positive signal).
    """

    user_column: ColumnName = "user"
    item_column: ColumnName = "item"
    rating_column: ColumnName | None = None

    @property
    def implicit_feedback(self) -> bool:
        return self.rating_column is None


PARAMETERS_BY_MODALITY: dict[Modality, type[TrainingParameters]] = {
    Modality.IMAGE: ImageParameters,
    Modality.TEXT: TextParameters,
    Modality.SOUND: SoundParameters,
    Modality.TABULAR: TabularParameters,
    Modality.OBJECT_DETECTION: ObjectDetectionParameters,
    Modality.WORD_TAGGING: WordTaggingParameters,
    Modality.RECOMMENDATION: RecommenderParameters,
}

_OPTIONAL_POSITIVE_INT = TypeAdapter(PositiveInt | None)


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "parameters"
        problems.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(problems)


def _split_columns(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Iterable):
        return list(value)
    return value


def normalize_parameters(modality: Modality | str, **raw: Any) -> TrainingParameters:
    """Build a validated parameter record for ``modality`` from raw option values.

    Tabular runs also accept ``max_depth`` and ``max_iterations``; they refine
    the variant chosen from the ``algorithm`` keyword.

    Args:
        modality: Target modality.
        **raw: Option values keyed by parameter field name. ``None`` values
            are dropped so the record's defaults apply.

    Returns:
        The modality's frozen TrainingParameters subclass.

    Raises:
        ConfigurationError: If a required field is missing or a value is invalid.
    """
    try:
        modality = Modality(modality)
    except ValueError:
        raise ConfigurationError(f"Unknown modality '{modality}'") from None

    values = {key: value for key, value in raw.items() if value is not None}

    try:
        if modality is Modality.TABULAR:
            max_depth = _OPTIONAL_POSITIVE_INT.validate_python(values.pop("max_depth", None))
            max_iterations = _OPTIONAL_POSITIVE_INT.validate_python(
                values.pop("max_iterations", None)
            )
            algorithm = values.get("algorithm")
            if algorithm is None or isinstance(algorithm, str):
                values["algorithm"] = select_algorithm(algorithm, max_depth, max_iterations)
            if "feature_columns" in values:
                values["feature_columns"] = _split_columns(values["feature_columns"])

        return PARAMETERS_BY_MODALITY[modality](**values)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid {modality.value} parameters: {_format_validation_error(exc)}"
        ) from exc
