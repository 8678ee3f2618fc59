"""Object detection trainer."""

from pathlib import Path

from trainkit.data.loader import ANNOTATIONS_FILE
from trainkit.engine.base import DatasetHandle, DatasetKind, EngineConfig, EngineTask, ModelHandle
from trainkit.errors import MissingAnnotationsError
from trainkit.trainers.base import BaseTrainer, TrainingSummary
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.labels import annotation_labels
from trainkit.trainers.metrics import DETECTION_IOU_THRESHOLD, extract_map
from trainkit.trainers.parameters import ObjectDetectionParameters
from trainkit.trainers.results import ObjectDetectorResult


@TrainerFactory.register(Modality.OBJECT_DETECTION)
class ObjectDetectorTrainer(BaseTrainer):
    """Trains an object detector from images plus bounding boxes in ``annotations.json``."""

    modality = Modality.OBJECT_DETECTION
    dataset_kind = DatasetKind.ANNOTATED_IMAGES
    parameters_class = ObjectDetectionParameters
    result_class = ObjectDetectorResult

    def check_preconditions(
        self, dataset_location: Path, parameters: ObjectDetectionParameters
    ) -> None:
        locations = [dataset_location]
        if parameters.validation_data is not None:
            locations.append(Path(parameters.validation_data))

        for location in locations:
            if not (location / ANNOTATIONS_FILE).is_file():
                raise MissingAnnotationsError(
                    f"{ANNOTATIONS_FILE} not found in {location}. "
                    f"Create an {ANNOTATIONS_FILE} file with bounding box annotations."
                )

    def build_config(
        self,
        parameters: ObjectDetectionParameters,
        dataset: DatasetHandle,
        validation: DatasetHandle | None,
    ) -> EngineConfig:
        return EngineConfig(
            task=EngineTask.OBJECT_DETECTOR,
            options={
                "max_iterations": parameters.max_iterations,
                "batch_size": parameters.batch_size,
                "iou_threshold": DETECTION_IOU_THRESHOLD,
            },
            validation=validation,
        )

    def describe_dataset(self, dataset: DatasetHandle) -> str:
        return f"Found {dataset.row_count} annotated images..."

    def describe_training(
        self, parameters: ObjectDetectionParameters, dataset: DatasetHandle
    ) -> str:
        return f"Training object detector (max {parameters.max_iterations} iterations)..."

    def summarize(
        self, model: ModelHandle, dataset_location: Path, parameters: ObjectDetectionParameters
    ) -> TrainingSummary:
        training, validation = extract_map(model)
        return TrainingSummary(
            training={"map": training},
            validation={"map": validation},
            labels=annotation_labels(dataset_location),
        )
