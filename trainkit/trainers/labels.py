"""Label discovery. Every function returns a sorted, de-duplicated list."""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from trainkit.data.loader import ANNOTATIONS_FILE, label_directories, read_json_records, read_table


def directory_labels(root: str | Path) -> list[str]:
    """Class labels of a labeled-directories dataset: its subdirectory names."""
    return label_directories(root)


def annotation_labels(root: str | Path) -> list[str]:
    """Distinct box labels across ``annotations.json``, as strings."""
    labels: set[str] = set()
    for record in read_json_records(Path(root) / ANNOTATIONS_FILE):
        boxes = record.get("annotations")
        if not isinstance(boxes, list):
            continue
        for box in boxes:
            if isinstance(box, dict) and box.get("label") is not None:
                labels.add(str(box["label"]))
    return sorted(labels)


def column_labels(table: pd.DataFrame | str | Path, column: str) -> list[str]:
    """Distinct non-null values of ``column``, as strings."""
    if not isinstance(table, pd.DataFrame):
        table = read_table(table)
    if column not in table.columns:
        return []
    return sorted({str(value) for value in table[column].dropna()})


def tag_labels(table: pd.DataFrame | str | Path, column: str) -> list[str]:
    """Distinct tags across every label sequence in ``column``."""
    if not isinstance(table, pd.DataFrame):
        table = read_table(table)
    if column not in table.columns:
        return []

    labels: set[str] = set()
    for sequence in table[column]:
        labels.update(_string_items(sequence))
    return sorted(labels)


def _string_items(sequence: Any) -> Iterable[str]:
    # A plain string cell is a whitespace-separated sequence.
    if isinstance(sequence, str):
        return sequence.split()
    if not isinstance(sequence, Iterable):
        return ()
    return (item for item in sequence if isinstance(item, str))
