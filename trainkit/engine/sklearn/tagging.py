"""Word tagging: per-token logistic regression over context features."""

from typing import Any

import numpy as np
import pandas as pd
from sklearn.feature_extraction import DictVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline

from trainkit.config import Settings
from trainkit.engine.base import DatasetHandle, EngineConfig, EngineTask
from trainkit.engine.sklearn.classification import error_report, require_classes, require_columns
from trainkit.engine.sklearn.features import token_features
from trainkit.engine.sklearn.handle import SklearnModelHandle
from trainkit.errors import TrainingError


def as_sequence(cell: Any) -> list[str]:
    """A token or tag sequence: a JSON list, or a whitespace-separated string."""
    if isinstance(cell, str):
        return cell.split()
    if isinstance(cell, (list, tuple, np.ndarray)):
        return [str(item) for item in cell]
    return []


def sentences(table: pd.DataFrame, token_column: str, label_column: str) -> list[tuple[list[str], list[str]]]:
    require_columns(table, [token_column, label_column])

    pairs = []
    for row, (tokens, tags) in enumerate(zip(table[token_column], table[label_column])):
        tokens, tags = as_sequence(tokens), as_sequence(tags)
        if len(tokens) != len(tags):
            raise TrainingError(f"Row {row} has {len(tokens)} tokens but {len(tags)} labels")
        if tokens:
            pairs.append((tokens, tags))
    return pairs


def token_rows(pairs: list[tuple[list[str], list[str]]]) -> tuple[list[dict[str, Any]], list[str]]:
    features, tags = [], []
    for tokens, labels in pairs:
        features.extend(token_features(tokens, index) for index in range(len(tokens)))
        tags.extend(labels)
    return features, tags


class WordTaggerModel:
    """Tags every token of a sentence."""

    def __init__(self, pipeline: Pipeline, language: str | None):
        self.pipeline = pipeline
        self.language = language

    def tag(self, tokens: list[str]) -> list[str]:
        if not tokens:
            return []
        rows = [token_features(tokens, index) for index in range(len(tokens))]
        return [str(tag) for tag in self.pipeline.predict(rows)]


def fit_word_tagger(dataset: DatasetHandle, config: EngineConfig, settings: Settings) -> SklearnModelHandle:
    token_column = config.options.get("token_column", "tokens")
    label_column = config.options.get("label_column", "labels")

    pairs = sentences(dataset.payload, token_column, label_column)
    features, tags = token_rows(pairs)
    if not features:
        raise TrainingError("No tagged tokens to train on")
    require_classes(tags, "Word tagger")

    pipeline = Pipeline(
        [
            ("vectorize", DictVectorizer()),
            ("classifier", LogisticRegression(max_iter=1000)),
        ]
    )
    pipeline.fit(features, tags)
    model = WordTaggerModel(pipeline, config.options.get("language"))

    training = error_report(pipeline.predict(features), tags)
    validation = None
    if config.validation is not None:
        val_features, val_tags = token_rows(sentences(config.validation.payload, token_column, label_column))
        if val_features:
            validation = error_report(pipeline.predict(val_features), val_tags)

    return SklearnModelHandle(EngineTask.WORD_TAGGER, model, training, validation)
