import json
from pathlib import Path
from typing import Any

import pandas as pd

from trainkit.errors import DataLoadError

# Bounding-box annotations expected beside object-detection images
ANNOTATIONS_FILE = "annotations.json"

# Tabular formats understood by read_table
TABLE_SUFFIXES = {".csv", ".json"}


def read_json_records(file_path: str | Path) -> list[dict[str, Any]]:
    """Read a JSON file holding a list of objects.

    Args:
        file_path: Path to the JSON file.

    Returns:
        The list of records.

    Raises:
        DataLoadError: If the file cannot be read or is not a list of objects.
    """
    file_path = Path(file_path)

    try:
        with open(file_path, encoding="utf-8") as f:
            records = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise DataLoadError(f"Cannot read JSON data from {file_path}: {exc}") from exc

    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise DataLoadError(f"Expected a JSON array of objects in {file_path}")

    return records


def read_table(file_path: str | Path) -> pd.DataFrame:
    """Load a CSV or JSON table.

    Args:
        file_path: Path to a ``.csv`` file or a ``.json`` array of records.

    Returns:
        DataFrame with one row per record.

    Raises:
        DataLoadError: If the format is unsupported or the file is malformed.
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()

    if suffix not in TABLE_SUFFIXES:
        raise DataLoadError(
            f"Unsupported table format '{suffix or file_path.name}'. Expected one of: "
            f"{', '.join(sorted(TABLE_SUFFIXES))}"
        )

    if suffix == ".json":
        df = pd.DataFrame(read_json_records(file_path))
    else:
        try:
            df = pd.read_csv(file_path, na_values=["NA", ""])
        except (OSError, ValueError) as exc:
            raise DataLoadError(f"Cannot read CSV data from {file_path}: {exc}") from exc

    if df.empty:
        raise DataLoadError(f"No rows found in {file_path}")

    return df


def label_directories(root: str | Path) -> list[str]:
    """Return the sorted names of the immediate, non-hidden subdirectories of ``root``.

    Returns an empty list when ``root`` is not a readable directory.
    """
    root = Path(root)
    if not root.is_dir():
        return []

    return sorted(
        child.name
        for child in root.iterdir()
        if child.is_dir() and not child.name.startswith(".")
    )


def list_labeled_files(root: str | Path, suffixes: set[str]) -> list[tuple[Path, str]]:
    """List files laid out as ``root/<label>/<file>``.

    Args:
        root: Directory containing one subdirectory per label.
        suffixes: Accepted lowercase file suffixes (e.g. ``{".png", ".jpg"}``).

    Returns:
        ``(path, label)`` pairs in a stable order.

    Raises:
        DataLoadError: If ``root`` is not a directory or holds no usable files.
    """
    root = Path(root)
    if not root.is_dir():
        raise DataLoadError(f"Expected a directory of labeled subdirectories: {root}")

    samples = [
        (path, label)
        for label in label_directories(root)
        for path in sorted((root / label).iterdir())
        if path.is_file() and path.suffix.lower() in suffixes
    ]

    if not samples:
        raise DataLoadError(
            f"No files with extensions {', '.join(sorted(suffixes))} found under "
            f"labeled subdirectories of {root}"
        )

    return samples


def read_annotations(root: str | Path) -> list[dict[str, Any]]:
    """Read ``annotations.json`` from an object-detection dataset directory.

    Each record names an ``image`` and lists its ``annotations``, every one
    holding a ``label`` and pixel ``coordinates`` (``x``/``y`` box centre,
    ``width``, ``height``).

    Raises:
        DataLoadError: If the file is missing or malformed.
    """
    return read_json_records(Path(root) / ANNOTATIONS_FILE)
