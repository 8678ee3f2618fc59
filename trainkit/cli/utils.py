"""Rich UI utilities for CLI commands."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trainkit.trainers.results import TrainingResult

console = Console()
err_console = Console(stderr=True)

# (label, training field, validation field, unit suffix)
METRIC_ROWS = [
    ("Accuracy", "training_accuracy", "validation_accuracy", "%"),
    ("RMSE", "training_rmse", "validation_rmse", ""),
    ("mAP@0.5", "training_map", "validation_map", ""),
]


def _format(value: float | None, suffix: str) -> str:
    if value is None:
        return "-"
    return f"{value:.2f}{suffix}" if suffix else f"{value:.4f}"


def create_metrics_table(result: TrainingResult) -> Table | None:
    """Create a Rich table of training and validation metrics. None if the result has none."""
    table = Table(title="Model Metrics", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="dim")
    table.add_column("Training", justify="right")
    table.add_column("Validation", justify="right")

    for label, training_field, validation_field, suffix in METRIC_ROWS:
        if training_field not in type(result).model_fields:
            continue
        training = getattr(result, training_field)
        validation = getattr(result, validation_field)
        if training is None and validation is None:
            continue
        table.add_row(label, _format(training, suffix), _format(validation, suffix))

    return table if table.row_count else None


def create_feature_importance_table(
    feature_importance: dict[str, float],
    top_n: int = 5,
) -> Table:
    """Create a Rich table with top feature importances."""
    table = Table(title="Top Feature Importance", show_header=True, header_style="bold cyan")
    table.add_column("Rank", style="dim", width=6)
    table.add_column("Feature")
    table.add_column("Importance", justify="right")

    sorted_features = sorted(feature_importance.items(), key=lambda x: x[1], reverse=True)
    for i, (feature, importance) in enumerate(sorted_features[:top_n], 1):
        table.add_row(str(i), feature, f"{importance:.4f}")

    return table


def create_labels_table(labels: list[str], title: str = "Labels") -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("Label")
    for label in labels:
        table.add_row(label)
    return table


def success_panel(message: str, title: str = "Success") -> Panel:
    """Create a green success panel."""
    return Panel(message, title=title, border_style="green")


def error_panel(message: str, title: str = "Error") -> Panel:
    """Create a red error panel."""
    return Panel(message, title=title, border_style="red")


def info_panel(message: str, title: str = "Info") -> Panel:
    """Create a blue info panel."""
    return Panel(message, title=title, border_style="blue")


def config_panel(config: dict[str, str], title: str = "Configuration") -> Panel:
    """Create a panel showing configuration."""
    lines = [f"[bold]{k}:[/bold] {v}" for k, v in config.items()]
    return Panel("\n".join(lines), title=title, border_style="cyan")
