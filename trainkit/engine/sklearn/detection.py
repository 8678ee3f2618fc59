"""Object detection: per-label presence classifiers plus learned prior boxes.

Each label gets a prior box (the mean normalized box of its training
annotations) and a logistic presence classifier over image features,
trained by mini-batch SGD. A detection is the label's prior box scored by
its presence probability. Quality is reported as mean average precision
at a fixed IoU threshold.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image
from sklearn.linear_model import SGDClassifier
from sklearn.preprocessing import StandardScaler

from trainkit.config import Settings
from trainkit.data.loader import read_annotations
from trainkit.engine.base import DatasetHandle, EngineConfig, EngineTask, MetricReport
from trainkit.engine.sklearn.features import image_vector, load_image
from trainkit.engine.sklearn.handle import SklearnModelHandle
from trainkit.errors import DataLoadError, TrainingError

# Normalized (centre x, centre y, width, height)
Box = tuple[float, float, float, float]


@dataclass
class DetectionSample:
    image_path: Path
    boxes: list[tuple[str, Box]] = field(default_factory=list)


def _normalized_box(coordinates: Any, width: int, height: int) -> Box:
    if not isinstance(coordinates, dict):
        raise ValueError("coordinates must be an object")
    return (
        float(coordinates["x"]) / width,
        float(coordinates["y"]) / height,
        float(coordinates["width"]) / width,
        float(coordinates["height"]) / height,
    )


def load_detection_samples(root: Path) -> list[DetectionSample]:
    """Read ``annotations.json`` and resolve every image beside it.

    Raises:
        DataLoadError: On a missing image or a malformed annotation.
    """
    samples = []
    for index, record in enumerate(read_annotations(root)):
        image_name = record.get("image")
        if not isinstance(image_name, str):
            raise DataLoadError(f"Annotation record {index} has no 'image' name")

        image_path = root / image_name
        if not image_path.is_file():
            raise DataLoadError(f"Annotated image not found: {image_path}")

        with Image.open(image_path) as image:
            width, height = image.size

        boxes = []
        for box in record.get("annotations") or []:
            try:
                if box["label"] is None:
                    raise ValueError("box has no label")
                boxes.append((str(box["label"]), _normalized_box(box.get("coordinates"), width, height)))
            except (KeyError, TypeError, ValueError) as exc:
                raise DataLoadError(f"Malformed annotation for {image_name}: {exc}") from exc

        samples.append(DetectionSample(image_path, boxes))

    if not samples:
        raise DataLoadError(f"No annotated images in {root}")

    return samples


def iou(a: Box, b: Box) -> float:
    """Intersection over union of two centre-format boxes."""
    ax0, ay0, ax1, ay1 = a[0] - a[2] / 2, a[1] - a[3] / 2, a[0] + a[2] / 2, a[1] + a[3] / 2
    bx0, by0, bx1, by1 = b[0] - b[2] / 2, b[1] - b[3] / 2, b[0] + b[2] / 2, b[1] + b[3] / 2

    inter_w = max(0.0, min(ax1, bx1) - max(ax0, bx0))
    inter_h = max(0.0, min(ay1, by1) - max(ay0, by0))
    intersection = inter_w * inter_h
    union = a[2] * a[3] + b[2] * b[3] - intersection
    return intersection / union if union > 0 else 0.0


def average_precision(scores: list[float], hits: list[bool], positives: int) -> float:
    """All-point interpolated average precision."""
    if positives == 0:
        return float("nan")
    if not scores:
        return 0.0

    order = np.argsort(-np.asarray(scores), kind="stable")
    hit_array = np.asarray(hits, dtype=float)[order]
    true_pos = np.cumsum(hit_array)
    false_pos = np.cumsum(1.0 - hit_array)

    recall = np.concatenate([[0.0], true_pos / positives, [1.0]])
    precision = np.concatenate([[0.0], true_pos / np.maximum(true_pos + false_pos, 1e-12), [0.0]])
    for i in range(len(precision) - 2, -1, -1):
        precision[i] = max(precision[i], precision[i + 1])

    changed = np.where(recall[1:] != recall[:-1])[0]
    return float(np.sum((recall[changed + 1] - recall[changed]) * precision[changed + 1]))


class ObjectDetectorModel:
    """Fitted detector: feature scaler, label list, per-label classifiers and prior boxes."""

    def __init__(self, image_size: int, scaler: StandardScaler, labels: list[str], classifiers, priors):
        self.image_size = image_size
        self.scaler = scaler
        self.labels = labels
        self.classifiers: dict[str, SGDClassifier] = classifiers
        self.priors: dict[str, Box] = priors

    def features(self, paths: list[Path]) -> np.ndarray:
        vectors = np.array([image_vector(load_image(path, self.image_size)) for path in paths])
        return self.scaler.transform(vectors)

    def detect(self, features: np.ndarray) -> list[list[tuple[str, float, Box]]]:
        """Detections per image as ``(label, score, box)``."""
        detections: list[list[tuple[str, float, Box]]] = [[] for _ in range(len(features))]
        for label in self.labels:
            scores = self.classifiers[label].predict_proba(features)[:, 1]
            for row, score in enumerate(scores):
                detections[row].append((label, float(score), self.priors[label]))
        return detections

    def mean_average_precision(self, samples: list[DetectionSample], threshold: float) -> float:
        detections = self.detect(self.features([sample.image_path for sample in samples]))

        precisions = []
        for label in self.labels:
            scores, hits, positives = [], [], 0
            for sample, found in zip(samples, detections):
                truth = [box for name, box in sample.boxes if name == label]
                positives += len(truth)
                matched = [False] * len(truth)
                for name, score, box in found:
                    if name != label:
                        continue
                    overlaps = [iou(box, other) for other in truth]
                    best = int(np.argmax(overlaps)) if overlaps else -1
                    hit = best >= 0 and overlaps[best] >= threshold and not matched[best]
                    if hit:
                        matched[best] = True
                    scores.append(score)
                    hits.append(hit)
            ap = average_precision(scores, hits, positives)
            if not np.isnan(ap):
                precisions.append(ap)

        return float(np.mean(precisions)) if precisions else float("nan")


def fit_object_detector(dataset: DatasetHandle, config: EngineConfig, settings: Settings) -> SklearnModelHandle:
    samples: list[DetectionSample] = dataset.payload
    max_iterations = config.options.get("max_iterations", 500)
    batch_size = config.options.get("batch_size", 8)
    threshold = config.options.get("iou_threshold", 0.5)

    labels = sorted({name for sample in samples for name, _ in sample.boxes})
    if not labels:
        raise TrainingError("No bounding-box annotations to train on")

    vectors = np.array([image_vector(load_image(sample.image_path, settings.image_size)) for sample in samples])
    scaler = StandardScaler().fit(vectors)
    features = scaler.transform(vectors)

    priors: dict[str, Box] = {}
    classifiers: dict[str, SGDClassifier] = {}
    rng = np.random.default_rng(settings.random_state)
    order = rng.permutation(len(samples))

    for label in labels:
        boxes = np.array([box for sample in samples for name, box in sample.boxes if name == label])
        priors[label] = tuple(float(v) for v in boxes.mean(axis=0))

        presence = np.array([int(any(name == label for name, _ in sample.boxes)) for sample in samples])
        classifier = SGDClassifier(loss="log_loss", random_state=settings.random_state)
        for step in range(max_iterations):
            start = (step * batch_size) % len(samples)
            batch = np.take(order, range(start, start + batch_size), mode="wrap")
            classifier.partial_fit(features[batch], presence[batch], classes=[0, 1])
        classifiers[label] = classifier

    model = ObjectDetectorModel(settings.image_size, scaler, labels, classifiers, priors)

    training = MetricReport(mean_average_precision=model.mean_average_precision(samples, threshold))
    validation = None
    if config.validation is not None:
        validation = MetricReport(
            mean_average_precision=model.mean_average_precision(config.validation.payload, threshold)
        )

    return SklearnModelHandle(EngineTask.OBJECT_DETECTOR, model, training, validation)
