"""Tests for the trainkit CLI.

Justification: the CLI is the user-facing boundary. Exit codes tell scripts
whether a run never started (2) or started and failed (1), and ``--json``
output must stay parseable.
"""

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from trainkit.cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger on every call."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestTrainCommands:
    def test_image_json_output(self, image_dataset: Path, tmp_path: Path):
        output = tmp_path / "pets.model"

        result = runner.invoke(app, ["image", str(image_dataset), "-o", str(output), "--json", "--iterations", "10"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["classLabels"] == ["cat", "dog"]
        assert 0 <= payload["trainingAccuracy"] <= 100
        assert "validationAccuracy" not in payload
        assert payload["modelPath"] == str(output)
        assert output.exists()

    def test_image_human_output(self, image_dataset: Path, tmp_path: Path):
        result = runner.invoke(
            app, ["image", str(image_dataset), "-o", str(tmp_path / "pets.model"), "--no-augmentation"]
        )

        assert result.exit_code == 0, result.output
        assert "Training Complete" in result.output
        assert "Accuracy" in result.output

    def test_tabular_regressor_json(self, tabular_csv: Path, tmp_path: Path):
        result = runner.invoke(
            app,
            [
                "tabular",
                str(tabular_csv),
                "-o",
                str(tmp_path / "prices.model"),
                "-t",
                "price",
                "--type",
                "regressor",
                "--algorithm",
                "rf",
                "--max-iterations",
                "10",
                "-j",
            ],
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert "trainingRMSE" in payload
        assert "trainingAccuracy" not in payload
        assert set(payload["featureImportance"]) == {"size", "rooms", "color", "category"}

    def test_recommend_json_has_no_rmse(self, interactions_csv: Path, tmp_path: Path):
        result = runner.invoke(app, ["recommend", str(interactions_csv), "-o", str(tmp_path / "r.model"), "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert "trainingRMSE" not in payload
        assert "validationRMSE" not in payload

    def test_word_tag_json(self, tagging_json: Path, tmp_path: Path):
        result = runner.invoke(app, ["word-tag", str(tagging_json), "-o", str(tmp_path / "t.model"), "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["tagLabels"] == ["B-PER", "I-PER", "O"]


class TestExitCodes:
    def test_missing_target_did_not_start(self, tabular_csv: Path, tmp_path: Path):
        result = runner.invoke(app, ["tabular", str(tabular_csv), "-o", str(tmp_path / "m.model")])

        assert result.exit_code == 2
        assert not (tmp_path / "m.model").exists()

    def test_invalid_overlap_did_not_start(self, sound_dataset: Path, tmp_path: Path):
        result = runner.invoke(app, ["sound", str(sound_dataset), "-o", str(tmp_path / "m.model"), "--overlap", "1.5"])

        assert result.exit_code == 2

    def test_missing_annotations_did_not_start(self, image_dataset: Path, tmp_path: Path):
        result = runner.invoke(app, ["object-detect", str(image_dataset), "-o", str(tmp_path / "m.model")])

        assert result.exit_code == 2
        assert "annotations.json" in result.output

    def test_training_failure_exits_1(self, text_csv: Path, tmp_path: Path):
        result = runner.invoke(
            app, ["text", str(text_csv), "-o", str(tmp_path / "m.model"), "--label-column", "sentiment", "--json"]
        )

        assert result.exit_code == 1
        assert "sentiment" in result.output

    def test_nonexistent_dataset_is_rejected(self, tmp_path: Path):
        result = runner.invoke(app, ["image", str(tmp_path / "absent"), "-o", str(tmp_path / "m.model")])

        assert result.exit_code == 2

    def test_output_is_required(self, image_dataset: Path):
        result = runner.invoke(app, ["image", str(image_dataset)])

        assert result.exit_code == 2


class TestInfoCommand:
    def test_info_reads_metadata(self, interactions_csv: Path, tmp_path: Path):
        output = tmp_path / "r.model"
        runner.invoke(app, ["recommend", str(interactions_csv), "-o", str(output), "--author", "Ada", "--json"])

        result = runner.invoke(app, ["info", str(output), "--json"])

        assert result.exit_code == 0, result.output
        metadata = json.loads(result.stdout)
        assert metadata["author"] == "Ada"
        assert metadata["short_description"] == "Recommender trained with trainkit"
        assert metadata["modality"] == "recommendation"

    def test_info_human_output(self, interactions_csv: Path, tmp_path: Path):
        output = tmp_path / "r.model"
        runner.invoke(app, ["recommend", str(interactions_csv), "-o", str(output), "--json"])

        result = runner.invoke(app, ["info", str(output)])

        assert result.exit_code == 0, result.output
        assert "Model Information" in result.output

    def test_info_on_foreign_file(self, tmp_path: Path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        result = runner.invoke(app, ["info", str(path)])

        assert result.exit_code == 1
