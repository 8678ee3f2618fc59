"""Item recommendation by truncated SVD of the user-item matrix."""

import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.decomposition import TruncatedSVD

from trainkit.config import Settings
from trainkit.engine.base import DatasetHandle, EngineConfig, EngineTask
from trainkit.engine.sklearn.classification import require_columns
from trainkit.engine.sklearn.handle import SklearnModelHandle
from trainkit.errors import TrainingError
from trainkit.logging_config import get_logger

logger = get_logger()


class RecommenderModel:
    """User and item factors with the ids they index."""

    def __init__(self, users: list[str], items: list[str], user_factors: np.ndarray, item_factors: np.ndarray, interactions):
        self.users = users
        self.items = items
        self.user_factors = user_factors
        self.item_factors = item_factors
        self.interactions = interactions
        self._user_index = {user: i for i, user in enumerate(users)}

    def recommend(self, user: str, count: int = 10, exclude_seen: bool = True) -> list[tuple[str, float]]:
        """Top ``count`` items for ``user`` as ``(item, score)``. Unknown users get none."""
        row = self._user_index.get(str(user))
        if row is None:
            return []

        scores = self.user_factors[row] @ self.item_factors.T
        if exclude_seen:
            seen = self.interactions[row].indices
            scores[seen] = -np.inf

        ranked = [i for i in np.argsort(-scores, kind="stable") if np.isfinite(scores[i])]
        return [(self.items[i], float(scores[i])) for i in ranked[:count]]


def interaction_matrix(table: pd.DataFrame, user_column: str, item_column: str, rating_column: str | None):
    columns = [user_column, item_column] + ([rating_column] if rating_column else [])
    require_columns(table, columns)

    frame = table[columns].dropna()
    if frame.empty:
        raise TrainingError("No complete user-item interactions to train on")

    users = sorted(frame[user_column].astype(str).unique())
    items = sorted(frame[item_column].astype(str).unique())
    rows = frame[user_column].astype(str).map({user: i for i, user in enumerate(users)}).to_numpy()
    cols = frame[item_column].astype(str).map({item: i for i, item in enumerate(items)}).to_numpy()

    if rating_column:
        try:
            values = pd.to_numeric(frame[rating_column]).to_numpy(dtype=float)
        except (TypeError, ValueError) as exc:
            raise TrainingError(f"Rating column '{rating_column}' must be numeric") from exc
    else:
        values = np.ones(len(frame))

    matrix = sparse.csr_matrix((values, (rows, cols)), shape=(len(users), len(items)))
    if not rating_column:
        # Repeated implicit interactions still count once.
        matrix.data = np.ones_like(matrix.data)
    return users, items, matrix


def fit_recommender(dataset: DatasetHandle, config: EngineConfig, settings: Settings) -> SklearnModelHandle:
    rating_column = None if config.options.get("implicit", True) else config.options.get("rating_column")
    users, items, matrix = interaction_matrix(
        dataset.payload,
        config.options.get("user_column", "user"),
        config.options.get("item_column", "item"),
        rating_column,
    )

    if len(items) < 2:
        raise TrainingError("Recommender needs at least two distinct items")

    n_components = max(1, min(settings.recommender_factors, len(items) - 1, len(users) - 1))
    svd = TruncatedSVD(n_components=n_components, algorithm="randomized", random_state=settings.random_state)
    user_factors = svd.fit_transform(matrix)
    logger.info("Recommender factorized", users=len(users), items=len(items), factors=n_components)

    model = RecommenderModel(users, items, user_factors, svd.components_.T, matrix)
    # Rating error is not reported for recommenders.
    return SklearnModelHandle(EngineTask.RECOMMENDER, model)
