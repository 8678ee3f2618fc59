"""Tests for the scikit-learn engine's building blocks.

Justification: feature extraction and the detection metric feed every
reported number. A wrong IoU or AP silently skews object-detection results.
"""

import math
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from PIL import Image

from trainkit.engine.sklearn.detection import average_precision, iou
from trainkit.engine.sklearn.features import augment_image, audio_vector, image_vector, token_features
from trainkit.engine.sklearn.tagging import as_sequence
from trainkit.engine.sklearn.classification import as_categorical, categorical_columns


class TestIoU:
    def test_identical_boxes(self):
        assert iou((0.5, 0.5, 0.2, 0.2), (0.5, 0.5, 0.2, 0.2)) == pytest.approx(1.0)

    def test_disjoint_boxes(self):
        assert iou((0.1, 0.1, 0.1, 0.1), (0.9, 0.9, 0.1, 0.1)) == 0.0

    def test_half_overlap(self):
        # Two unit boxes offset by half a width share 1/3 of their union.
        assert iou((0.5, 0.5, 1.0, 1.0), (1.0, 0.5, 1.0, 1.0)) == pytest.approx(1 / 3)


class TestAveragePrecision:
    def test_perfect_ranking(self):
        assert average_precision([0.9, 0.8], [True, True], positives=2) == pytest.approx(1.0)

    def test_false_positive_ranked_first(self):
        # Precision at the single true positive is 1/2.
        assert average_precision([0.9, 0.8], [False, True], positives=1) == pytest.approx(0.5)

    def test_missed_positive_halves_recall(self):
        assert average_precision([0.9], [True], positives=2) == pytest.approx(0.5)

    def test_no_ground_truth_is_nan(self):
        assert math.isnan(average_precision([0.5], [False], positives=0))

    def test_no_detections_is_zero(self):
        assert average_precision([], [], positives=3) == 0.0


class TestImageFeatures:
    def test_vector_is_scaled(self):
        image = Image.new("RGB", (4, 4), (255, 0, 0))

        vector = image_vector(image)

        assert vector.shape == (48,)
        assert vector.max() == pytest.approx(1.0)
        assert vector.min() == 0.0

    def test_one_variant_per_option(self):
        image = Image.new("RGB", (16, 16), (10, 20, 30))
        options = ["crop", "rotation", "blur", "exposure", "noise", "flip"]

        variants = augment_image(image, options, np.random.default_rng(0))

        assert len(variants) == len(options)
        assert all(v.size == (16, 16) for v in variants)

    def test_no_options_no_variants(self):
        assert augment_image(Image.new("RGB", (8, 8)), [], np.random.default_rng(0)) == []


class TestAudioFeatures:
    def test_band_statistics(self, sound_dataset: Path):
        path = next((sound_dataset / "low").iterdir())

        vector = audio_vector(path, overlap_factor=0.5, window_seconds=0.1, bands=8)

        assert vector.shape == (16,)
        assert np.all(np.isfinite(vector))

    def test_tones_differ(self, sound_dataset: Path):
        low = audio_vector(next((sound_dataset / "low").iterdir()), 0.5, 0.1, 8)
        high = audio_vector(next((sound_dataset / "high").iterdir()), 0.5, 0.1, 8)

        assert not np.allclose(low, high)


class TestTokenFeatures:
    def test_sentence_boundaries(self):
        tokens = ["Anna", "runs"]

        first, last = token_features(tokens, 0), token_features(tokens, 1)

        assert first["BOS"] is True
        assert first["next.lower"] == "runs"
        assert last["EOS"] is True
        assert last["prev.is_title"] is True

    @pytest.mark.parametrize(
        "cell,expected",
        [(["a", "b"], ["a", "b"]), ("a b", ["a", "b"]), (None, []), (float("nan"), [])],
    )
    def test_as_sequence(self, cell, expected):
        assert as_sequence(cell) == expected


class TestCategoricalColumns:
    def test_strings_kept_missing_as_nan(self):
        frame = pd.DataFrame({"n": [1.0, 2.0], "c": ["x", None], "d": [1, 2]})
        frame["d"] = frame["d"].astype(object)

        columns = categorical_columns(frame)
        converted = as_categorical(frame, columns)

        assert columns == ["c", "d"]
        assert converted.loc[0, "d"] == "1"
        assert converted["c"].isna().tolist() == [False, True]
