"""scikit-learn implementation of the training engine."""

from collections.abc import Callable
from pathlib import Path

from trainkit.config import Settings, get_settings
from trainkit.data.loader import list_labeled_files, read_table
from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, EngineTask, ModelHandle, TrainingEngine
from trainkit.engine.sklearn.classification import (
    fit_image_classifier,
    fit_sound_classifier,
    fit_tabular,
    fit_text_classifier,
)
from trainkit.engine.sklearn.detection import fit_object_detector, load_detection_samples
from trainkit.engine.sklearn.features import AUDIO_SUFFIXES, IMAGE_SUFFIXES
from trainkit.engine.sklearn.handle import SklearnModelHandle, load_artifact
from trainkit.engine.sklearn.recommendation import fit_recommender
from trainkit.engine.sklearn.tagging import fit_word_tagger
from trainkit.logging_config import get_logger

logger = get_logger()

Fitter = Callable[[DatasetHandle, EngineConfig, Settings], SklearnModelHandle]

FITTERS: dict[EngineTask, Fitter] = {
    EngineTask.IMAGE_CLASSIFIER: fit_image_classifier,
    EngineTask.SOUND_CLASSIFIER: fit_sound_classifier,
    EngineTask.TEXT_CLASSIFIER: fit_text_classifier,
    EngineTask.TABULAR_CLASSIFIER: fit_tabular,
    EngineTask.TABULAR_REGRESSOR: fit_tabular,
    EngineTask.OBJECT_DETECTOR: fit_object_detector,
    EngineTask.WORD_TAGGER: fit_word_tagger,
    EngineTask.RECOMMENDER: fit_recommender,
}


class SklearnEngine(TrainingEngine):
    """Loads datasets with pandas/Pillow/scipy and fits scikit-learn and XGBoost models."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def load_dataset(self, location: Path, kind: DatasetKind) -> DatasetHandle:
        location = Path(location)

        if kind is DatasetKind.LABELED_DIRECTORIES:
            samples = list_labeled_files(location, IMAGE_SUFFIXES | AUDIO_SUFFIXES)
            return DatasetHandle(location, kind, len(samples), payload=samples)

        if kind is DatasetKind.ANNOTATED_IMAGES:
            samples = load_detection_samples(location)
            return DatasetHandle(location, kind, len(samples), payload=samples)

        table = read_table(location)
        return DatasetHandle(location, kind, len(table), [str(c) for c in table.columns], payload=table)

    def fit(self, dataset: DatasetHandle, config: EngineConfig) -> ModelHandle:
        logger.debug("Dispatching fit", task=config.task.value, rows=dataset.row_count)
        return FITTERS[config.task](dataset, config, self.settings)


__all__ = ["FITTERS", "SklearnEngine", "SklearnModelHandle", "load_artifact"]
