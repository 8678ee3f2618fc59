"""Turn engine metric reports into the figures shown to users.

Validation figures are optional: they exist only when the engine returned
a report for the validation split and the value is a finite number.
"""

import math

from trainkit.engine.base import MetricReport, ModelHandle, Split
from trainkit.errors import TrainingError

# IoU threshold at which object-detection mAP is reported
DETECTION_IOU_THRESHOLD = 0.5


def optional_metric(value: float | None) -> float | None:
    """Return ``value`` as a float, or None when it is missing or not finite."""
    if value is None:
        return None
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def accuracy_from_error(error_rate: float | None) -> float | None:
    """Convert a classification error rate (0-1) to an accuracy percentage (0-100)."""
    error_rate = optional_metric(error_rate)
    if error_rate is None:
        return None
    return (1.0 - error_rate) * 100


def _report(model: ModelHandle, split: Split) -> MetricReport:
    return model.metrics(split) or MetricReport()


def _required(value: float | None, name: str) -> float:
    if value is None:
        raise TrainingError(f"Engine reported no training {name} for the fitted model")
    return value


def extract_accuracy(model: ModelHandle) -> tuple[float, float | None]:
    """Training and validation accuracy (percent) from a classifier or tagger."""
    training = accuracy_from_error(_report(model, Split.TRAINING).error_rate)
    validation = accuracy_from_error(_report(model, Split.VALIDATION).error_rate)
    return _required(training, "accuracy"), validation


def extract_rmse(model: ModelHandle) -> tuple[float, float | None]:
    """Training and validation RMSE from a regressor."""
    training = optional_metric(_report(model, Split.TRAINING).rmse)
    validation = optional_metric(_report(model, Split.VALIDATION).rmse)
    return _required(training, "rmse"), validation


def extract_map(model: ModelHandle) -> tuple[float, float | None]:
    """Training and validation mean average precision at IoU 0.5 from a detector."""
    training = optional_metric(_report(model, Split.TRAINING).mean_average_precision)
    validation = optional_metric(_report(model, Split.VALIDATION).mean_average_precision)
    return _required(training, "map"), validation
