"""Fitters for image, sound, text and tabular models."""

import warnings
from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.decomposition import TruncatedSVD
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.exceptions import ConvergenceWarning
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.impute import SimpleImputer
from sklearn.linear_model import LinearRegression, LogisticRegression
from sklearn.metrics import accuracy_score, mean_squared_error
from sklearn.model_selection import cross_val_score
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import LabelEncoder, OneHotEncoder, StandardScaler
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor
from xgboost import XGBClassifier, XGBRegressor

from trainkit.config import Settings
from trainkit.engine.base import DatasetHandle, EngineConfig, EngineTask, MetricReport
from trainkit.engine.sklearn.features import (
    AUDIO_SUFFIXES,
    IMAGE_SUFFIXES,
    audio_vector,
    augment_image,
    image_vector,
    load_image,
)
from trainkit.engine.sklearn.handle import SklearnModelHandle
from trainkit.errors import TrainingError
from trainkit.logging_config import get_logger
from trainkit.trainers.algorithms import Algorithm, AlgorithmKind, TextAlgorithm

logger = get_logger()

CV_FOLDS = 3


def error_report(predicted, expected) -> MetricReport:
    return MetricReport(error_rate=float(1.0 - accuracy_score(expected, predicted)))


def rmse_report(predicted, expected) -> MetricReport:
    return MetricReport(rmse=float(np.sqrt(mean_squared_error(expected, predicted))))


def require_classes(labels, task: str) -> None:
    if len(set(labels)) < 2:
        raise TrainingError(f"{task} needs examples of at least two classes")


def require_columns(table: pd.DataFrame, columns: list[str]) -> None:
    missing = [column for column in columns if column not in table.columns]
    if missing:
        raise TrainingError(f"Column(s) not found in data: {', '.join(missing)}")


def _samples(dataset: DatasetHandle, suffixes: set[str], kind: str) -> list[tuple]:
    samples = [(path, label) for path, label in dataset.payload if path.suffix.lower() in suffixes]
    if not samples:
        raise TrainingError(f"No {kind} files found under {dataset.location}")
    return samples


def _fit_quietly(estimator, features, targets):
    # Iteration caps are user-chosen; hitting them is expected.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        return estimator.fit(features, targets)


# ---------------------------------------------------------------------------
# Image and sound
# ---------------------------------------------------------------------------


def fit_image_classifier(dataset: DatasetHandle, config: EngineConfig, settings: Settings) -> SklearnModelHandle:
    size = settings.image_size
    rng = np.random.default_rng(settings.random_state)
    augmentation = config.options.get("augmentation", [])

    features, labels, extra_features, extra_labels = [], [], [], []
    for path, label in _samples(dataset, IMAGE_SUFFIXES, "image"):
        image = load_image(path, size)
        features.append(image_vector(image))
        labels.append(label)
        for variant in augment_image(image, augmentation, rng):
            extra_features.append(image_vector(variant))
            extra_labels.append(label)
    require_classes(labels, "Image classifier")

    pipeline = Pipeline(
        [
            ("scaler", StandardScaler()),
            ("classifier", LogisticRegression(max_iter=config.options.get("max_iterations", 25))),
        ]
    )
    _fit_quietly(pipeline, np.array(features + extra_features), labels + extra_labels)

    training = error_report(pipeline.predict(np.array(features)), labels)
    validation = None
    if config.validation is not None:
        pairs = _samples(config.validation, IMAGE_SUFFIXES, "image")
        val_features = np.array([image_vector(load_image(path, size)) for path, _ in pairs])
        validation = error_report(pipeline.predict(val_features), [label for _, label in pairs])

    return SklearnModelHandle(EngineTask.IMAGE_CLASSIFIER, pipeline, training, validation)


def fit_sound_classifier(dataset: DatasetHandle, config: EngineConfig, settings: Settings) -> SklearnModelHandle:
    overlap = config.options.get("overlap_factor", 0.5)

    def featurize(pairs):
        return np.array(
            [audio_vector(path, overlap, settings.sound_window_seconds, settings.sound_bands) for path, _ in pairs]
        )

    pairs = _samples(dataset, AUDIO_SUFFIXES, "audio")
    labels = [label for _, label in pairs]
    require_classes(labels, "Sound classifier")

    features = featurize(pairs)
    pipeline = Pipeline([("scaler", StandardScaler()), ("classifier", LogisticRegression(max_iter=1000))])
    _fit_quietly(pipeline, features, labels)

    training = error_report(pipeline.predict(features), labels)
    validation = None
    if config.validation is not None:
        val_pairs = _samples(config.validation, AUDIO_SUFFIXES, "audio")
        validation = error_report(pipeline.predict(featurize(val_pairs)), [label for _, label in val_pairs])

    return SklearnModelHandle(EngineTask.SOUND_CLASSIFIER, pipeline, training, validation)


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def _text_frame(table: pd.DataFrame, text_column: str, label_column: str) -> tuple[pd.Series, pd.Series]:
    require_columns(table, [text_column, label_column])
    frame = table[[text_column, label_column]].dropna()
    return frame[text_column].astype(str), frame[label_column].astype(str)


def build_text_pipeline(algorithm: str, texts: pd.Series, settings: Settings) -> Pipeline:
    """Word n-gram maximum entropy, or character n-gram embeddings for transfer learning."""
    if algorithm == TextAlgorithm.TRANSFER_LEARNING.value:
        vectorizer = TfidfVectorizer(analyzer="char_wb", ngram_range=(2, 4), sublinear_tf=True)
        n_features = len(vectorizer.fit(texts).vocabulary_)
        n_components = max(1, min(settings.text_embedding_dim, n_features - 1, len(texts) - 1))
        return Pipeline(
            [
                ("tfidf", vectorizer),
                ("embedding", TruncatedSVD(n_components=n_components, random_state=settings.random_state)),
                ("classifier", LogisticRegression(max_iter=1000)),
            ]
        )

    return Pipeline(
        [
            ("tfidf", TfidfVectorizer(ngram_range=(1, 2), sublinear_tf=True)),
            ("classifier", LogisticRegression(max_iter=1000)),
        ]
    )


def fit_text_classifier(dataset: DatasetHandle, config: EngineConfig, settings: Settings) -> SklearnModelHandle:
    text_column = config.options.get("text_column", "text")
    label_column = config.options.get("label_column", "label")

    texts, labels = _text_frame(dataset.payload, text_column, label_column)
    require_classes(labels, "Text classifier")

    pipeline = build_text_pipeline(config.options.get("algorithm", TextAlgorithm.MAX_ENT.value), texts, settings)
    _fit_quietly(pipeline, texts, labels)

    training = error_report(pipeline.predict(texts), labels)
    validation = None
    if config.validation is not None:
        val_texts, val_labels = _text_frame(config.validation.payload, text_column, label_column)
        validation = error_report(pipeline.predict(val_texts), val_labels)

    return SklearnModelHandle(EngineTask.TEXT_CLASSIFIER, pipeline, training, validation)


# ---------------------------------------------------------------------------
# Tabular
# ---------------------------------------------------------------------------


class TabularModel:
    """Preprocessing + estimator pipeline that predicts in the target's own labels."""

    def __init__(
        self,
        pipeline: Pipeline,
        feature_columns: list[str],
        categorical_columns: list[str],
        target_column: str,
        encoder: LabelEncoder | None = None,
    ):
        self.pipeline = pipeline
        self.feature_columns = feature_columns
        self.categorical_columns = categorical_columns
        self.target_column = target_column
        self.encoder = encoder

    def predict(self, table: pd.DataFrame) -> np.ndarray:
        features = as_categorical(table[self.feature_columns], self.categorical_columns)
        predictions = self.pipeline.predict(features)
        if self.encoder is not None:
            return self.encoder.inverse_transform(np.asarray(predictions).astype(int))
        return np.asarray(predictions)


def _kwargs(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _random_forest(regression: bool):
    def build(algorithm: Algorithm, seed: int):
        cls = RandomForestRegressor if regression else RandomForestClassifier
        return cls(
            random_state=seed,
            **_kwargs(max_depth=algorithm.max_depth, n_estimators=algorithm.max_iterations),
        )

    return build


def _boosted_tree(regression: bool):
    def build(algorithm: Algorithm, seed: int):
        cls = XGBRegressor if regression else XGBClassifier
        return cls(
            random_state=seed,
            **_kwargs(max_depth=algorithm.max_depth, n_estimators=algorithm.max_iterations),
        )

    return build


def _decision_tree(regression: bool):
    def build(algorithm: Algorithm, seed: int):
        cls = DecisionTreeRegressor if regression else DecisionTreeClassifier
        return cls(random_state=seed, **_kwargs(max_depth=algorithm.max_depth))

    return build


EstimatorBuilder = Callable[[Algorithm, int], Any]

# None marks a variant that does not apply to the task; it falls back to
# automatic selection.
CLASSIFIERS: dict[AlgorithmKind, EstimatorBuilder | None] = {
    AlgorithmKind.AUTOMATIC: None,
    AlgorithmKind.RANDOM_FOREST: _random_forest(regression=False),
    AlgorithmKind.BOOSTED_TREE: _boosted_tree(regression=False),
    AlgorithmKind.DECISION_TREE: _decision_tree(regression=False),
    AlgorithmKind.LINEAR_REGRESSION: None,
    AlgorithmKind.LOGISTIC_REGRESSION: lambda algorithm, seed: LogisticRegression(max_iter=1000),
}

REGRESSORS: dict[AlgorithmKind, EstimatorBuilder | None] = {
    AlgorithmKind.AUTOMATIC: None,
    AlgorithmKind.RANDOM_FOREST: _random_forest(regression=True),
    AlgorithmKind.BOOSTED_TREE: _boosted_tree(regression=True),
    AlgorithmKind.DECISION_TREE: _decision_tree(regression=True),
    AlgorithmKind.LINEAR_REGRESSION: lambda algorithm, seed: LinearRegression(),
    AlgorithmKind.LOGISTIC_REGRESSION: None,
}

AUTOMATIC_CANDIDATES = {
    False: [AlgorithmKind.RANDOM_FOREST, AlgorithmKind.BOOSTED_TREE, AlgorithmKind.LOGISTIC_REGRESSION],
    True: [AlgorithmKind.RANDOM_FOREST, AlgorithmKind.BOOSTED_TREE, AlgorithmKind.LINEAR_REGRESSION],
}


def build_preprocessor(features: pd.DataFrame) -> ColumnTransformer:
    """Impute numeric columns; impute and one-hot encode everything else."""
    categorical = categorical_columns(features)
    numeric = [column for column in features.columns if column not in categorical]

    transformers = []
    if numeric:
        transformers.append(
            ("num", SimpleImputer(strategy="median", keep_empty_features=True), numeric)
        )
    if categorical:
        transformers.append(
            (
                "cat",
                Pipeline(
                    [
                        ("impute", SimpleImputer(strategy="most_frequent", keep_empty_features=True)),
                        ("encode", OneHotEncoder(handle_unknown="ignore")),
                    ]
                ),
                categorical,
            )
        )
    return ColumnTransformer(transformers, sparse_threshold=0.0)


def categorical_columns(features: pd.DataFrame) -> list[str]:
    return [column for column in features.columns if not pd.api.types.is_numeric_dtype(features[column])]


def as_categorical(features: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Cast ``columns`` to strings, keeping missing values as NaN for the imputer."""
    features = features.copy()
    for column in columns:
        features[column] = features[column].map(lambda value: str(value) if pd.notna(value) else np.nan).astype(object)
    return features


def _cv_feasible(targets: np.ndarray, regression: bool) -> bool:
    if len(targets) < 2 * CV_FOLDS:
        return False
    if regression:
        return True
    _, counts = np.unique(targets, return_counts=True)
    return len(counts) >= 2 and counts.min() >= CV_FOLDS


def select_automatic(features, targets, regression: bool, seed: int) -> tuple[AlgorithmKind, Any]:
    """Pick the best candidate by cross-validation, or a random forest when data is too small."""
    builders = REGRESSORS if regression else CLASSIFIERS
    default = AlgorithmKind.RANDOM_FOREST

    if not _cv_feasible(targets, regression):
        return default, builders[default](Algorithm(), seed)

    scoring = "neg_root_mean_squared_error" if regression else "accuracy"
    best_kind, best_score = default, -np.inf
    for kind in AUTOMATIC_CANDIDATES[regression]:
        candidate = Pipeline(
            [("preprocess", build_preprocessor(features)), ("model", builders[kind](Algorithm(), seed))]
        )
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            scores = cross_val_score(candidate, features, targets, cv=CV_FOLDS, scoring=scoring)
        if np.all(np.isnan(scores)):
            continue
        score = float(np.nanmean(scores))
        logger.debug("Automatic candidate scored", algorithm=kind.value, score=round(score, 4))
        if score > best_score:
            best_kind, best_score = kind, score

    return best_kind, builders[best_kind](Algorithm(), seed)


def build_estimator(algorithm: Algorithm, features, targets, regression: bool, seed: int) -> tuple[AlgorithmKind, Any]:
    builders = REGRESSORS if regression else CLASSIFIERS
    builder = builders[algorithm.kind]
    if builder is None:
        return select_automatic(features, targets, regression, seed)
    return algorithm.kind, builder(algorithm, seed)


def column_importance(pipeline: Pipeline, feature_columns: list[str]) -> dict[str, float] | None:
    """Importance per input column, summing over one-hot outputs. None if the model has none."""
    model = pipeline.named_steps["model"]
    if hasattr(model, "feature_importances_"):
        raw = np.asarray(model.feature_importances_, dtype=float)
    elif hasattr(model, "coef_"):
        coef = np.abs(np.asarray(model.coef_, dtype=float))
        raw = coef.mean(axis=0) if coef.ndim > 1 else coef
    else:
        return None

    preprocessor: ColumnTransformer = pipeline.named_steps["preprocess"]
    totals: dict[str, float] = {}
    offset = 0
    for name, transformer, columns in preprocessor.transformers_:
        if name == "num":
            for column in columns:
                totals[column] = float(raw[offset])
                offset += 1
        elif name == "cat":
            encoder = transformer.named_steps["encode"]
            for column, categories in zip(columns, encoder.categories_):
                width = len(categories)
                totals[column] = float(raw[offset : offset + width].sum())
                offset += width

    total = sum(totals.values())
    if total > 0:
        totals = {column: value / total for column, value in totals.items()}

    return {str(column): round(totals.get(column, 0.0), 6) for column in feature_columns}


def _tabular_frame(table: pd.DataFrame, feature_columns: list[str], target_column: str, regression: bool):
    require_columns(table, [*feature_columns, target_column])
    frame = table.dropna(subset=[target_column])
    if frame.empty:
        raise TrainingError(f"Target column '{target_column}' has no values")

    features = frame[feature_columns]
    if regression:
        try:
            targets = pd.to_numeric(frame[target_column]).to_numpy(dtype=float)
        except (TypeError, ValueError) as exc:
            raise TrainingError(f"Target column '{target_column}' must be numeric for a regressor") from exc
    else:
        targets = frame[target_column].astype(str).to_numpy()
    return features, targets


def fit_tabular(dataset: DatasetHandle, config: EngineConfig, settings: Settings) -> SklearnModelHandle:
    regression = config.task is EngineTask.TABULAR_REGRESSOR
    target_column = config.options["target_column"]
    feature_columns = list(config.options["feature_columns"])
    algorithm = config.options.get("algorithm") or Algorithm()

    if not feature_columns:
        raise TrainingError("No feature columns to train on")

    raw_features, targets = _tabular_frame(dataset.payload, feature_columns, target_column, regression)
    categorical = categorical_columns(raw_features)
    features = as_categorical(raw_features, categorical)

    encoder = None
    fit_targets = targets
    if not regression:
        require_classes(targets, "Tabular classifier")
        encoder = LabelEncoder().fit(targets)
        fit_targets = encoder.transform(targets)

    kind, estimator = build_estimator(algorithm, features, fit_targets, regression, settings.random_state)
    logger.info("Tabular estimator chosen", algorithm=kind.value, requested=algorithm.kind.value)

    pipeline = Pipeline([("preprocess", build_preprocessor(features)), ("model", estimator)])
    _fit_quietly(pipeline, features, fit_targets)
    model = TabularModel(pipeline, feature_columns, categorical, target_column, encoder)

    report = rmse_report if regression else error_report
    training = report(model.predict(raw_features), targets)
    validation = None
    if config.validation is not None:
        val_features, val_targets = _tabular_frame(config.validation.payload, feature_columns, target_column, regression)
        validation = report(model.predict(val_features), val_targets)

    task = EngineTask.TABULAR_REGRESSOR if regression else EngineTask.TABULAR_CLASSIFIER
    return SklearnModelHandle(task, model, training, validation, column_importance(pipeline, feature_columns))
