"""Persist fitted models with their metadata."""

from pathlib import Path
from typing import Any

from trainkit.artifacts.metadata import ModelMetadata
from trainkit.config.settings import get_settings
from trainkit.engine.base import ModelHandle
from trainkit.errors import ArtifactWriteError
from trainkit.logging_config import get_logger
from trainkit.trainers.factory import Modality

logger = get_logger()

TOOL_NAME = "trainkit"

DEFAULT_DESCRIPTIONS: dict[Modality, str] = {
    Modality.IMAGE: "Image classifier",
    Modality.TEXT: "Text classifier",
    Modality.SOUND: "Sound classifier",
    Modality.TABULAR: "Tabular model",
    Modality.OBJECT_DETECTION: "Object detector",
    Modality.WORD_TAGGING: "Word tagger",
    Modality.RECOMMENDATION: "Recommender",
}


def default_description(modality: Modality, subject: str | None = None) -> str:
    """Default one-sentence description, e.g. ``"Image classifier trained with trainkit"``."""
    return f"{subject or DEFAULT_DESCRIPTIONS[modality]} trained with {TOOL_NAME}"


def build_metadata(
    modality: Modality,
    author: str | None = None,
    description: str | None = None,
    subject: str | None = None,
    **details: Any,
) -> ModelMetadata:
    """Create metadata with the tool defaults applied.

    Args:
        modality: Modality the model was trained for.
        author: Model author. Defaults to the tool identifier.
        description: Model description. Defaults to a per-modality sentence.
        subject: Overrides the model noun in the default description
            (e.g. ``"Tabular regressor"``).
        **details: Extra ModelMetadata fields (parameters, metrics, labels).

    Returns:
        A new ModelMetadata instance.
    """
    settings = get_settings()
    return ModelMetadata(
        author=author or settings.default_author,
        short_description=description or default_description(modality, subject),
        version=settings.model_version,
        modality=modality.value,
        **details,
    )


def write_artifact(model: ModelHandle, output_path: Path | str, metadata: ModelMetadata) -> Path:
    """Serialize a fitted model to ``output_path``, replacing any existing file.

    Args:
        model: Fitted model handle.
        output_path: Destination file. Missing parent directories are created.
        metadata: Metadata to embed in the artifact.

    Returns:
        The path written.

    Raises:
        ArtifactWriteError: If the model cannot be persisted.
    """
    output_path = Path(output_path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        model.serialize(output_path, metadata.model_dump(mode="json"))
    except ArtifactWriteError:
        raise
    except Exception as exc:
        logger.error("Artifact write failed", path=str(output_path), error=str(exc))
        raise ArtifactWriteError(f"Could not write model to {output_path}: {exc}") from exc

    logger.info("Artifact written", path=str(output_path), artifact_id=metadata.artifact_id)
    return output_path


def read_artifact_metadata(path: Path | str) -> ModelMetadata:
    """Read the metadata embedded in a written model.

    Raises:
        FileNotFoundError: If the artifact does not exist.
        ValueError: If the file is not a trainkit artifact.
    """
    from trainkit.engine.sklearn.handle import load_artifact

    artifact = load_artifact(path)
    return ModelMetadata(**artifact["metadata"])
