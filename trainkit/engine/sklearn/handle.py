"""Fitted-model handle and on-disk artifact format for the scikit-learn engine.

An artifact is a single joblib file holding a dict::

    {"format": ARTIFACT_FORMAT, "task": ..., "metadata": {...}, "model": ...}
"""

import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import joblib
import numpy as np
import sklearn
import xgboost

from trainkit.engine.base import EngineTask, MetricReport, ModelHandle, Split

ARTIFACT_FORMAT = "trainkit.sklearn/1"


def framework_versions() -> dict[str, str]:
    """Versions of the libraries that produced a model."""
    return {
        "scikit-learn": sklearn.__version__,
        "xgboost": xgboost.__version__,
        "numpy": np.__version__,
        "python": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }


@dataclass
class SklearnModelHandle(ModelHandle):
    """A fitted scikit-learn model with the metrics computed right after fitting.

    Attributes:
        task: Task the model was fitted for.
        model: Fitted estimator (or task-specific wrapper around one).
        training_report: Metrics on the training data.
        validation_report: Metrics on the validation data; None when none was given.
        importances: Feature importance per input column, if the estimator has any.
    """

    task: EngineTask
    model: Any
    training_report: MetricReport | None = None
    validation_report: MetricReport | None = None
    importances: dict[str, float] | None = None

    def metrics(self, split: Split) -> MetricReport | None:
        if split is Split.VALIDATION:
            return self.validation_report
        return self.training_report

    def feature_importance(self) -> dict[str, float] | None:
        return self.importances

    def serialize(self, path: Path, metadata: dict[str, Any]) -> None:
        """Write the artifact atomically: a temporary sibling file is renamed into place."""
        path = Path(path)
        payload = {
            "format": ARTIFACT_FORMAT,
            "task": self.task.value,
            "metadata": {**metadata, "framework_versions": framework_versions()},
            "model": self.model,
        }

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        os.close(fd)
        try:
            joblib.dump(payload, tmp_name)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def load_artifact(path: Path | str) -> dict[str, Any]:
    """Load an artifact written by ``SklearnModelHandle.serialize``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a trainkit artifact.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Model file not found: {path}")

    try:
        artifact = joblib.load(path)
    except Exception as exc:
        raise ValueError(f"Cannot read model artifact {path}: {exc}") from exc

    if not isinstance(artifact, dict) or artifact.get("format") != ARTIFACT_FORMAT:
        raise ValueError(f"Not a trainkit model artifact: {path}")

    return artifact
