"""End-to-end tests: real SklearnEngine on small synthetic datasets.

Justification: E2E tests verify the entire flow works together:
normalize parameters -> load data -> fit -> extract metrics -> write model
-> read the model back. They need no external services.
"""

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

import trainkit.trainers.strategies  # noqa: F401
from trainkit.artifacts.writer import read_artifact_metadata
from trainkit.config import Settings
from trainkit.engine.sklearn import FITTERS, SklearnEngine
from trainkit.engine.sklearn.classification import CLASSIFIERS, REGRESSORS, TabularModel
from trainkit.engine.sklearn.handle import load_artifact
from trainkit.engine.base import EngineTask
from trainkit.errors import DataLoadError, TrainingError
from trainkit.trainers.algorithms import AlgorithmKind
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.parameters import normalize_parameters
from trainkit.trainers.results import ClassifierResult, RegressorResult


@pytest.fixture
def engine() -> SklearnEngine:
    return SklearnEngine(Settings(image_size=8, text_embedding_dim=16, recommender_factors=4))


def train(modality: Modality, engine: SklearnEngine, dataset: Path, output: Path, **raw):
    trainer = TrainerFactory.create(modality, engine=engine)
    return trainer.train(dataset, output, normalize_parameters(modality, **raw))


class TestEngineCoverage:
    def test_every_task_has_a_fitter(self):
        assert set(FITTERS) == set(EngineTask)

    def test_every_algorithm_is_mapped(self):
        assert set(CLASSIFIERS) == set(AlgorithmKind)
        assert set(REGRESSORS) == set(AlgorithmKind)


class TestImageClassifier:
    def test_cat_dog_with_defaults(self, engine, image_dataset: Path, tmp_path: Path):
        output = tmp_path / "pets.model"

        result = train(Modality.IMAGE, engine, image_dataset, output)

        assert result.class_labels == ["cat", "dog"]
        assert 0 <= result.training_accuracy <= 100
        assert result.validation_accuracy is None
        assert "validationAccuracy" not in result.to_payload()

        metadata = read_artifact_metadata(output)
        assert metadata.labels == ["cat", "dog"]
        assert metadata.short_description == "Image classifier trained with trainkit"

    def test_with_validation_and_no_augmentation(self, engine, image_dataset: Path, tmp_path: Path):
        result = train(
            Modality.IMAGE,
            engine,
            image_dataset,
            tmp_path / "pets.model",
            augmentation=False,
            max_iterations=50,
            validation_data=image_dataset,
        )

        assert result.validation_accuracy is not None
        assert 0 <= result.validation_accuracy <= 100

    def test_single_class_fails_to_train(self, engine, image_dataset: Path, tmp_path: Path):
        for path in (image_dataset / "dog").iterdir():
            path.unlink()

        with pytest.raises(TrainingError, match="at least two classes"):
            train(Modality.IMAGE, engine, image_dataset, tmp_path / "m.model")

    def test_empty_directory_fails_to_load(self, engine, tmp_path: Path):
        (tmp_path / "data" / "cat").mkdir(parents=True)

        with pytest.raises(DataLoadError):
            train(Modality.IMAGE, engine, tmp_path / "data", tmp_path / "m.model")


class TestSoundClassifier:
    def test_tones(self, engine, sound_dataset: Path, tmp_path: Path):
        result = train(Modality.SOUND, engine, sound_dataset, tmp_path / "tones.model", overlap_factor=0.25)

        assert result.class_labels == ["high", "low"]
        assert result.training_accuracy == pytest.approx(100.0)


class TestTextClassifier:
    @pytest.mark.parametrize("algorithm", ["maxent", "transfer"])
    def test_reviews(self, engine, text_csv: Path, tmp_path: Path, algorithm):
        output = tmp_path / "reviews.model"

        result = train(Modality.TEXT, engine, text_csv, output, algorithm=algorithm, validation_data=text_csv)

        assert result.class_labels == ["negative", "positive"]
        assert 0 <= result.training_accuracy <= 100
        assert result.validation_accuracy is not None

        pipeline = load_artifact(output)["model"]
        assert set(pipeline.predict(["love it", "awful"])) <= {"negative", "positive"}

    def test_missing_label_column(self, engine, text_csv: Path, tmp_path: Path):
        with pytest.raises(TrainingError, match="sentiment"):
            train(Modality.TEXT, engine, text_csv, tmp_path / "m.model", label_column="sentiment")


class TestTabular:
    def test_random_forest_classifier(self, engine, tabular_csv: Path, tmp_path: Path):
        output = tmp_path / "houses.model"

        result = train(
            Modality.TABULAR,
            engine,
            tabular_csv,
            output,
            target_column="category",
            algorithm="rf",
            max_iterations=20,
        )

        assert type(result) is ClassifierResult
        assert result.training_accuracy > 90
        assert set(result.feature_importance) == {"size", "rooms", "color", "price"}
        assert sum(result.feature_importance.values()) == pytest.approx(1.0, abs=1e-3)

        model = load_artifact(output)["model"]
        assert isinstance(model, TabularModel)
        frame = pd.read_csv(tabular_csv)
        assert set(model.predict(frame)) <= {"large", "small"}

    def test_boosted_tree_regressor_with_validation(self, engine, tabular_csv: Path, tmp_path: Path):
        result = train(
            Modality.TABULAR,
            engine,
            tabular_csv,
            tmp_path / "prices.model",
            target_column="price",
            model_type="regressor",
            algorithm="boosted",
            max_depth=3,
            max_iterations=30,
            feature_columns="size,rooms,color",
            validation_data=tabular_csv,
        )

        assert type(result) is RegressorResult
        assert result.training_rmse >= 0
        assert result.validation_rmse == pytest.approx(result.training_rmse)
        assert set(result.feature_importance) == {"size", "rooms", "color"}

    @pytest.mark.parametrize("algorithm", ["auto", "linear", "dt", "logistic"])
    def test_other_classifier_variants(self, engine, tabular_csv: Path, tmp_path: Path, algorithm):
        result = train(
            Modality.TABULAR,
            engine,
            tabular_csv,
            tmp_path / "m.model",
            target_column="category",
            algorithm=algorithm,
        )

        assert 0 <= result.training_accuracy <= 100

    @pytest.mark.parametrize("algorithm", ["auto", "linear", "logistic"])
    def test_other_regressor_variants(self, engine, tabular_csv: Path, tmp_path: Path, algorithm):
        result = train(
            Modality.TABULAR,
            engine,
            tabular_csv,
            tmp_path / "m.model",
            target_column="price",
            model_type="regressor",
            algorithm=algorithm,
        )

        assert np.isfinite(result.training_rmse)

    def test_missing_values_are_imputed(self, engine, tabular_frame: pd.DataFrame, tmp_path: Path):
        frame = tabular_frame.copy()
        frame.loc[0:5, "size"] = np.nan
        frame.loc[3:8, "color"] = np.nan
        path = tmp_path / "gaps.csv"
        frame.to_csv(path, index=False)

        result = train(Modality.TABULAR, engine, path, tmp_path / "m.model", target_column="category", algorithm="rf")

        assert 0 <= result.training_accuracy <= 100

    def test_text_target_for_regressor_fails(self, engine, tabular_csv: Path, tmp_path: Path):
        with pytest.raises(TrainingError, match="must be numeric"):
            train(
                Modality.TABULAR,
                engine,
                tabular_csv,
                tmp_path / "m.model",
                target_column="color",
                model_type="regressor",
            )

    def test_unknown_target_fails(self, engine, tabular_csv: Path, tmp_path: Path):
        with pytest.raises(TrainingError, match="missing_column"):
            train(Modality.TABULAR, engine, tabular_csv, tmp_path / "m.model", target_column="missing_column")

    def test_unsupported_file_fails_to_load(self, engine, tmp_path: Path):
        path = tmp_path / "data.parquet"
        path.write_text("nope")

        with pytest.raises(DataLoadError, match="Unsupported table format"):
            train(Modality.TABULAR, engine, path, tmp_path / "m.model", target_column="y")


class TestObjectDetector:
    def test_boxes(self, engine, detection_dataset: Path, tmp_path: Path):
        output = tmp_path / "boxes.model"

        result = train(
            Modality.OBJECT_DETECTION,
            engine,
            detection_dataset,
            output,
            max_iterations=20,
            batch_size=4,
            validation_data=detection_dataset,
        )

        assert result.class_labels == ["ball", "cup"]
        assert 0 < result.training_map <= 1
        assert result.validation_map == pytest.approx(result.training_map)

        model = load_artifact(output)["model"]
        assert model.labels == ["ball", "cup"]

    def test_missing_image_fails_to_load(self, engine, detection_dataset: Path, tmp_path: Path):
        (detection_dataset / "img_3.png").unlink()

        with pytest.raises(DataLoadError, match="img_3.png"):
            train(Modality.OBJECT_DETECTION, engine, detection_dataset, tmp_path / "m.model")

    def test_malformed_annotation_fails_to_load(self, engine, detection_dataset: Path, tmp_path: Path):
        records = json.loads((detection_dataset / "annotations.json").read_text())
        records[0]["annotations"][0]["coordinates"] = {"x": 1}
        (detection_dataset / "annotations.json").write_text(json.dumps(records))

        with pytest.raises(DataLoadError, match="Malformed annotation"):
            train(Modality.OBJECT_DETECTION, engine, detection_dataset, tmp_path / "m.model")

    def test_numeric_labels_match_trained_labels(self, engine, detection_dataset: Path, tmp_path: Path):
        records = json.loads((detection_dataset / "annotations.json").read_text())
        for record in records:
            for box in record["annotations"]:
                box["label"] = 7 if box["label"] == "ball" else 9
        (detection_dataset / "annotations.json").write_text(json.dumps(records))
        output = tmp_path / "numbers.model"

        result = train(Modality.OBJECT_DETECTION, engine, detection_dataset, output, max_iterations=5, batch_size=4)

        assert result.class_labels == ["7", "9"]
        assert load_artifact(output)["model"].labels == result.class_labels

    def test_null_label_fails_to_load(self, engine, detection_dataset: Path, tmp_path: Path):
        records = json.loads((detection_dataset / "annotations.json").read_text())
        records[0]["annotations"][0]["label"] = None
        (detection_dataset / "annotations.json").write_text(json.dumps(records))

        with pytest.raises(DataLoadError, match="Malformed annotation"):
            train(Modality.OBJECT_DETECTION, engine, detection_dataset, tmp_path / "m.model")


class TestWordTagger:
    def test_tags(self, engine, tagging_json: Path, tmp_path: Path):
        output = tmp_path / "tagger.model"

        result = train(Modality.WORD_TAGGING, engine, tagging_json, output, language="en")

        assert result.tag_labels == ["B-PER", "I-PER", "O"]
        assert result.training_accuracy > 50

        model = load_artifact(output)["model"]
        assert model.language == "en"
        assert len(model.tag(["Anna", "went", "home"])) == 3

    def test_length_mismatch_fails(self, engine, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"tokens": ["a", "b"], "labels": ["O"]}]))

        with pytest.raises(TrainingError, match="2 tokens but 1 labels"):
            train(Modality.WORD_TAGGING, engine, path, tmp_path / "m.model")


class TestRecommender:
    def test_implicit_feedback(self, engine, interactions_csv: Path, tmp_path: Path):
        output = tmp_path / "recs.model"

        result = train(Modality.RECOMMENDATION, engine, interactions_csv, output)

        payload = result.to_payload()
        assert "trainingRMSE" not in payload
        assert "validationRMSE" not in payload

        model = load_artifact(output)["model"]
        recommendations = model.recommend("u0", count=2)
        assert len(recommendations) == 2
        assert model.recommend("nobody") == []

    def test_explicit_ratings(self, engine, tmp_path: Path):
        rows = [(f"u{u}", f"i{i}", float((u * i) % 5 + 1)) for u in range(6) for i in range(5) if (u + i) % 3]
        path = tmp_path / "ratings.csv"
        pd.DataFrame(rows, columns=["customer", "product", "stars"]).to_csv(path, index=False)

        result = train(
            Modality.RECOMMENDATION,
            engine,
            path,
            tmp_path / "recs.model",
            user_column="customer",
            item_column="product",
            rating_column="stars",
        )

        assert result.training_rmse is None
        assert result.validation_rmse is None

    def test_single_item_fails_clearly(self, engine, tmp_path: Path):
        path = tmp_path / "one_item.csv"
        pd.DataFrame({"user": ["u0", "u1"], "item": ["i0", "i0"]}).to_csv(path, index=False)

        with pytest.raises(TrainingError, match="at least two distinct items"):
            train(Modality.RECOMMENDATION, engine, path, tmp_path / "recs.model")
