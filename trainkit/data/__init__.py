"""Dataset readers shared by label discovery and the engine adapter."""

from trainkit.data.loader import (
    ANNOTATIONS_FILE,
    label_directories,
    list_labeled_files,
    read_annotations,
    read_json_records,
    read_table,
)

__all__ = [
    "ANNOTATIONS_FILE",
    "label_directories",
    "list_labeled_files",
    "read_annotations",
    "read_json_records",
    "read_table",
]
