"""Algorithm variants and the keyword selector that resolves them."""

from dataclasses import dataclass
from enum import Enum


class AlgorithmKind(str, Enum):
    """Tabular algorithm variants."""

    AUTOMATIC = "automatic"
    RANDOM_FOREST = "random_forest"
    BOOSTED_TREE = "boosted_tree"
    DECISION_TREE = "decision_tree"
    LINEAR_REGRESSION = "linear_regression"
    LOGISTIC_REGRESSION = "logistic_regression"


class TextAlgorithm(str, Enum):
    """Text classifier variants."""

    MAX_ENT = "max_ent"
    TRANSFER_LEARNING = "transfer_learning"


@dataclass(frozen=True)
class Algorithm:
    """A tabular algorithm choice with its optional refinements.

    Build instances through the named constructors; a variant only ever
    carries the payload it accepts (``decision_tree`` has no iteration cap,
    ``linear_regression`` has neither). ``None`` refinements let the engine
    pick its own default.
    """

    kind: AlgorithmKind = AlgorithmKind.AUTOMATIC
    max_depth: int | None = None
    max_iterations: int | None = None

    @classmethod
    def automatic(cls) -> "Algorithm":
        return cls(AlgorithmKind.AUTOMATIC)

    @classmethod
    def random_forest(
        cls, max_depth: int | None = None, max_iterations: int | None = None
    ) -> "Algorithm":
        return cls(AlgorithmKind.RANDOM_FOREST, max_depth, max_iterations)

    @classmethod
    def boosted_tree(
        cls, max_depth: int | None = None, max_iterations: int | None = None
    ) -> "Algorithm":
        return cls(AlgorithmKind.BOOSTED_TREE, max_depth, max_iterations)

    @classmethod
    def decision_tree(cls, max_depth: int | None = None) -> "Algorithm":
        return cls(AlgorithmKind.DECISION_TREE, max_depth)

    @classmethod
    def linear_regression(cls) -> "Algorithm":
        return cls(AlgorithmKind.LINEAR_REGRESSION)

    @classmethod
    def logistic_regression(cls) -> "Algorithm":
        return cls(AlgorithmKind.LOGISTIC_REGRESSION)

    def __str__(self) -> str:
        refinements = [
            f"{name}={value}"
            for name, value in (("max_depth", self.max_depth), ("max_iterations", self.max_iterations))
            if value is not None
        ]
        if not refinements:
            return self.kind.value
        return f"{self.kind.value}({', '.join(refinements)})"


# Keyword aliases per variant. The sets are disjoint.
ALGORITHM_ALIASES: dict[AlgorithmKind, frozenset[str]] = {
    AlgorithmKind.RANDOM_FOREST: frozenset({"randomforest", "random_forest", "rf"}),
    AlgorithmKind.BOOSTED_TREE: frozenset({"boostedtree", "boosted_tree", "boosted", "bt"}),
    AlgorithmKind.DECISION_TREE: frozenset({"decisiontree", "decision_tree", "dt"}),
    AlgorithmKind.LINEAR_REGRESSION: frozenset({"linear", "linearregression", "linear_regression"}),
    AlgorithmKind.LOGISTIC_REGRESSION: frozenset(
        {"logistic", "logisticregression", "logistic_regression"}
    ),
}

TEXT_ALGORITHM_ALIASES: dict[TextAlgorithm, frozenset[str]] = {
    TextAlgorithm.TRANSFER_LEARNING: frozenset({"transfer", "transferlearning", "transfer_learning"}),
}


def _normalize_keyword(keyword: str | None) -> str:
    return (keyword or "").strip().lower()


def select_algorithm(
    keyword: str | None,
    max_depth: int | None = None,
    max_iterations: int | None = None,
) -> Algorithm:
    """Resolve an algorithm keyword to a variant.

    Matching is case-insensitive. Unknown, empty or missing keywords resolve
    to ``automatic``; this never raises.

    Args:
        keyword: User-supplied name or alias (e.g. ``"rf"``, ``"BoostedTree"``).
        max_depth: Optional depth cap, attached to tree variants.
        max_iterations: Optional iteration cap, attached to ensemble variants.

    Returns:
        The selected Algorithm.

    Example:
        >>> select_algorithm("rf")
        Algorithm(kind=<AlgorithmKind.RANDOM_FOREST: 'random_forest'>, max_depth=None, max_iterations=None)
    """
    normalized = _normalize_keyword(keyword)

    for kind, aliases in ALGORITHM_ALIASES.items():
        if normalized not in aliases:
            continue
        if kind is AlgorithmKind.RANDOM_FOREST:
            return Algorithm.random_forest(max_depth, max_iterations)
        if kind is AlgorithmKind.BOOSTED_TREE:
            return Algorithm.boosted_tree(max_depth, max_iterations)
        if kind is AlgorithmKind.DECISION_TREE:
            return Algorithm.decision_tree(max_depth)
        if kind is AlgorithmKind.LINEAR_REGRESSION:
            return Algorithm.linear_regression()
        if kind is AlgorithmKind.LOGISTIC_REGRESSION:
            return Algorithm.logistic_regression()

    return Algorithm.automatic()


def select_text_algorithm(keyword: str | None) -> TextAlgorithm:
    """Resolve a text algorithm keyword; anything unrecognized is ``max_ent``."""
    normalized = _normalize_keyword(keyword)

    for algorithm, aliases in TEXT_ALGORITHM_ALIASES.items():
        if normalized in aliases:
            return algorithm

    return TextAlgorithm.MAX_ENT
