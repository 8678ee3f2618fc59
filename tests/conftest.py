"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import pytest
from PIL import Image
from scipy.io import wavfile

from trainkit.engine.base import (
    DatasetHandle,
    DatasetKind,
    EngineConfig,
    MetricReport,
    ModelHandle,
    Split,
    TrainingEngine,
)


@dataclass
class FakeModelHandle(ModelHandle):
    """Model handle with canned metrics; ``serialize`` writes the metadata as JSON."""

    training: MetricReport | None = field(default_factory=lambda: MetricReport(error_rate=0.1))
    validation: MetricReport | None = None
    importances: dict[str, float] | None = None
    serialize_error: Exception | None = None
    serialized: list[tuple[Path, dict]] = field(default_factory=list)

    def metrics(self, split: Split) -> MetricReport | None:
        return self.validation if split is Split.VALIDATION else self.training

    def feature_importance(self) -> dict[str, float] | None:
        return self.importances

    def serialize(self, path: Path, metadata: dict[str, Any]) -> None:
        if self.serialize_error is not None:
            raise self.serialize_error
        path.write_text(json.dumps(metadata))
        self.serialized.append((path, metadata))


class FakeEngine(TrainingEngine):
    """Engine double that records every call and returns a fixed model."""

    def __init__(
        self,
        model: FakeModelHandle | None = None,
        row_count: int = 10,
        columns: list[str] | None = None,
        load_error: Exception | None = None,
        fit_error: Exception | None = None,
    ):
        self.model = model or FakeModelHandle()
        self.row_count = row_count
        self.columns = columns or []
        self.load_error = load_error
        self.fit_error = fit_error
        self.loaded: list[tuple[Path, DatasetKind]] = []
        self.configs: list[EngineConfig] = []

    def load_dataset(self, location: Path, kind: DatasetKind) -> DatasetHandle:
        self.loaded.append((location, kind))
        if self.load_error is not None:
            raise self.load_error
        return DatasetHandle(location, kind, self.row_count, list(self.columns))

    def fit(self, dataset: DatasetHandle, config: EngineConfig) -> ModelHandle:
        self.configs.append(config)
        if self.fit_error is not None:
            raise self.fit_error
        return self.model


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


def _write_image(path: Path, rgb: tuple[int, int, int], rng: np.random.Generator, size: int = 24) -> None:
    pixels = np.clip(np.array(rgb) + rng.normal(0, 12, (size, size, 3)), 0, 255).astype(np.uint8)
    Image.fromarray(pixels).save(path)


@pytest.fixture
def image_dataset(tmp_path: Path) -> Path:
    """``cat/`` (reddish) and ``dog/`` (bluish) with six JPEGs each, plus a hidden directory."""
    rng = np.random.default_rng(0)
    root = tmp_path / "images"
    for label, rgb in (("cat", (200, 60, 50)), ("dog", (40, 70, 210))):
        (root / label).mkdir(parents=True)
        for i in range(6):
            _write_image(root / label / f"{label}_{i}.jpg", rgb, rng)
    (root / ".thumbnails").mkdir()
    return root


@pytest.fixture
def sound_dataset(tmp_path: Path) -> Path:
    """``low/`` and ``high/`` tones, five short 16 kHz WAV files each."""
    rng = np.random.default_rng(1)
    rate = 16000
    t = np.arange(int(rate * 0.5)) / rate
    root = tmp_path / "sounds"
    for label, freq in (("low", 220.0), ("high", 3000.0)):
        (root / label).mkdir(parents=True)
        for i in range(5):
            signal = np.sin(2 * np.pi * (freq + 10 * i) * t) + rng.normal(0, 0.05, len(t))
            wavfile.write(root / label / f"{label}_{i}.wav", rate, (signal * 20000).astype(np.int16))
    return root


@pytest.fixture
def text_csv(tmp_path: Path) -> Path:
    positive = ["great product, love it", "excellent and fun", "really great value", "love the quality", "fun and excellent"]
    negative = ["terrible, broke fast", "awful and boring", "really bad value", "hate the quality", "boring and awful"]
    df = pd.DataFrame(
        {
            "text": positive + negative,
            "label": ["positive"] * len(positive) + ["negative"] * len(negative),
        }
    )
    path = tmp_path / "reviews.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def tabular_frame() -> pd.DataFrame:
    rng = np.random.default_rng(42)
    n = 60
    size = rng.uniform(40, 200, n)
    rooms = rng.integers(1, 6, n)
    color = rng.choice(["red", "green", "blue"], n)
    price = 1000 * size + 5000 * rooms + rng.normal(0, 2000, n)
    return pd.DataFrame(
        {
            "size": size,
            "rooms": rooms,
            "color": color,
            "price": price,
            "category": np.where(size > 120, "large", "small"),
        }
    )


@pytest.fixture
def tabular_csv(tmp_path: Path, tabular_frame: pd.DataFrame) -> Path:
    path = tmp_path / "houses.csv"
    tabular_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def tagging_json(tmp_path: Path) -> Path:
    records = [
        {"tokens": ["John", "Smith", "went", "home"], "labels": ["B-PER", "I-PER", "O", "O"]},
        {"tokens": ["Mary", "Jones", "likes", "tea"], "labels": ["B-PER", "I-PER", "O", "O"]},
        {"tokens": ["the", "cat", "saw", "Anna", "Lee"], "labels": ["O", "O", "O", "B-PER", "I-PER"]},
        {"tokens": ["we", "met", "Paul"], "labels": ["O", "O", "B-PER"]},
    ]
    path = tmp_path / "tags.json"
    path.write_text(json.dumps(records))
    return path


@pytest.fixture
def interactions_csv(tmp_path: Path) -> Path:
    rows = [(f"u{u}", f"i{(u + k) % 6}") for u in range(8) for k in range(3)]
    path = tmp_path / "interactions.csv"
    pd.DataFrame(rows, columns=["user", "item"]).to_csv(path, index=False)
    return path


@pytest.fixture
def detection_dataset(tmp_path: Path) -> Path:
    """Eight 40x40 images with one or two labelled boxes each and an annotations.json."""
    rng = np.random.default_rng(3)
    root = tmp_path / "detection"
    root.mkdir()
    records = []
    for i in range(8):
        name = f"img_{i}.png"
        _write_image(root / name, (120, 120, 120), rng, size=40)
        annotations = [{"label": "ball", "coordinates": {"x": 12, "y": 12, "width": 10, "height": 10}}]
        if i % 2 == 0:
            annotations.append({"label": "cup", "coordinates": {"x": 28, "y": 28, "width": 12, "height": 14}})
        records.append({"image": name, "annotations": annotations})
    (root / "annotations.json").write_text(json.dumps(records))
    return root
