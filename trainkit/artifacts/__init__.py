"""Artifacts module: model metadata and persistence."""

from trainkit.artifacts.metadata import ModelMetadata
from trainkit.artifacts.writer import build_metadata, read_artifact_metadata, write_artifact

__all__ = [
    "ModelMetadata",
    "build_metadata",
    "read_artifact_metadata",
    "write_artifact",
]
