"""Metadata schema attached to every written model."""

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelMetadata(BaseModel):
    """Metadata stored alongside a trained model.

    ``author``, ``short_description`` and ``version`` describe the model for
    whoever consumes it; the remaining fields record how it was trained.
    """

    model_config = ConfigDict(protected_namespaces=())

    # Descriptive
    author: str = Field(description="Model author")
    short_description: str = Field(description="One-sentence model description")
    version: str = Field(default="1.0", description="Model version string")

    # Identifiers
    artifact_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique artifact identifier (UUID)",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when the artifact was created",
    )

    # Training information
    modality: str = Field(description="Training modality (e.g. 'image', 'tabular')")
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="Normalized training parameters",
    )
    training_metrics: dict[str, float] = Field(
        default_factory=dict,
        description="Metrics on the training set",
    )
    validation_metrics: dict[str, float] = Field(
        default_factory=dict,
        description="Metrics on the validation set, when one was supplied",
    )
    labels: list[str] = Field(
        default_factory=list,
        description="Class or tag labels discovered in the training data",
    )
    framework_versions: dict[str, str] = Field(
        default_factory=dict,
        description="Versions of the frameworks that produced the model",
    )
