"""CLI commands that train one model per invocation."""

import json
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn

# Import strategies to register them with the factory
import trainkit.trainers.strategies  # noqa: F401
from trainkit.cli.utils import (
    config_panel,
    console,
    create_feature_importance_table,
    create_labels_table,
    create_metrics_table,
    err_console,
    error_panel,
    success_panel,
)
from trainkit.errors import TrainkitError
from trainkit.logging_config import get_logger
from trainkit.trainers.base import ProgressEvent, ProgressStage
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.parameters import TrainingParameters, normalize_parameters
from trainkit.trainers.results import TrainingResult

logger = get_logger()

# Shared option declarations
OUTPUT = typer.Option(..., "--output", "-o", help="Where to write the trained model file")
AUTHOR = typer.Option(None, "--author", help="Model author metadata (default: trainkit)")
DESCRIPTION = typer.Option(None, "--description", help="Model description metadata")
JSON_OUTPUT = typer.Option(False, "--json", "-j", help="Print the result as JSON only")


def _validation_option(directory: bool) -> Any:
    return typer.Option(
        None,
        "--validation",
        exists=True,
        file_okay=not directory,
        dir_okay=directory,
        help="Validation data in the same layout as the training data",
    )


def _display(value: Any) -> str:
    if isinstance(value, (set, frozenset, list, tuple)):
        items = sorted(str(item.value if isinstance(item, Enum) else item) for item in value)
        return ", ".join(items) or "none"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _configuration(modality: Modality, dataset: Path, output: Path, parameters: TrainingParameters) -> dict[str, str]:
    config = {"Modality": modality.value, "Dataset": str(dataset), "Output": str(output)}
    for name in type(parameters).model_fields:
        value = getattr(parameters, name)
        if value is not None:
            config[name.replace("_", " ").title()] = _display(value)
    return config


def _show_result(result: TrainingResult) -> None:
    console.print()
    metrics = create_metrics_table(result)
    if metrics is not None:
        console.print(metrics)
        console.print()

    feature_importance = getattr(result, "feature_importance", None)
    if feature_importance:
        console.print(create_feature_importance_table(feature_importance))
        console.print()

    for field, title in (("class_labels", "Class Labels"), ("tag_labels", "Tag Labels")):
        labels = getattr(result, field, None)
        if labels:
            console.print(create_labels_table(labels, title=title))
            console.print()

    console.print(
        success_panel(
            f"[bold]Model:[/bold] {result.model_path}\n"
            f"[bold]Duration:[/bold] {result.training_duration:.2f}s",
            title="Training Complete",
        )
    )


def run_training(
    modality: Modality,
    dataset: Path,
    output: Path,
    *,
    author: str | None,
    description: str | None,
    json_output: bool,
    **raw: Any,
) -> None:
    """Normalize options, train, and report the result.

    Exits with 2 when the run did not start (bad options, missing
    prerequisites) and 1 when it started and failed.
    """
    try:
        parameters = normalize_parameters(modality, **raw)
        trainer = TrainerFactory.create(modality)

        if json_output:
            result = trainer.train(dataset, output, parameters, author=author, description=description)
        else:
            console.print(config_panel(_configuration(modality, dataset, output, parameters), title="Training Configuration"))
            console.print()
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Starting...", total=None)

                def report(event: ProgressEvent) -> None:
                    done = event.stage in (ProgressStage.DATA_LOADED, ProgressStage.MODEL_SAVED)
                    progress.update(task, description=f"[green]{event.message}" if done else event.message)

                result = trainer.train(
                    dataset,
                    output,
                    parameters,
                    author=author,
                    description=description,
                    progress=report,
                )
    except TrainkitError as exc:
        title = "Training Failed" if exc.started else "Training Not Started"
        err_console.print(error_panel(exc.message, title=title))
        raise typer.Exit(1 if exc.started else 2) from exc

    if json_output:
        typer.echo(json.dumps(result.to_payload(), indent=2))
        return

    _show_result(result)


def image(
    dataset: Path = typer.Argument(
        ..., exists=True, file_okay=False, help="Directory with one subdirectory of images per class"
    ),
    output: Path = OUTPUT,
    iterations: int | None = typer.Option(None, "--iterations", help="Maximum training iterations (default: 25)"),
    no_augmentation: bool = typer.Option(False, "--no-augmentation", help="Disable data augmentation"),
    validation: Path | None = _validation_option(directory=True),
    author: str | None = AUTHOR,
    description: str | None = DESCRIPTION,
    json_output: bool = JSON_OUTPUT,
) -> None:
    """Train an image classifier."""
    run_training(
        Modality.IMAGE,
        dataset,
        output,
        author=author,
        description=description,
        json_output=json_output,
        max_iterations=iterations,
        augmentation=False if no_augmentation else None,
        validation_data=validation,
    )


def text(
    dataset: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV or JSON table of labeled texts"),
    output: Path = OUTPUT,
    algorithm: str | None = typer.Option(None, "--algorithm", help="maxent (default) or transfer"),
    text_column: str | None = typer.Option(None, "--text-column", help="Text column (default: text)"),
    label_column: str | None = typer.Option(None, "--label-column", help="Label column (default: label)"),
    validation: Path | None = _validation_option(directory=False),
    author: str | None = AUTHOR,
    description: str | None = DESCRIPTION,
    json_output: bool = JSON_OUTPUT,
) -> None:
    """Train a text classifier."""
    run_training(
        Modality.TEXT,
        dataset,
        output,
        author=author,
        description=description,
        json_output=json_output,
        algorithm=algorithm,
        text_column=text_column,
        label_column=label_column,
        validation_data=validation,
    )


def sound(
    dataset: Path = typer.Argument(
        ..., exists=True, file_okay=False, help="Directory with one subdirectory of WAV files per class"
    ),
    output: Path = OUTPUT,
    overlap: float | None = typer.Option(None, "--overlap", help="Window overlap factor in [0, 1) (default: 0.5)"),
    validation: Path | None = _validation_option(directory=True),
    author: str | None = AUTHOR,
    description: str | None = DESCRIPTION,
    json_output: bool = JSON_OUTPUT,
) -> None:
    """Train a sound classifier."""
    run_training(
        Modality.SOUND,
        dataset,
        output,
        author=author,
        description=description,
        json_output=json_output,
        overlap_factor=overlap,
        validation_data=validation,
    )


def tabular(
    dataset: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV or JSON table"),
    output: Path = OUTPUT,
    target: str | None = typer.Option(None, "--target", "-t", help="Column to predict (required)"),
    model_type: str | None = typer.Option(None, "--type", help="classifier (default) or regressor"),
    algorithm: str | None = typer.Option(
        None, "--algorithm", help="auto, randomforest, boostedtree, decisiontree, linear or logistic"
    ),
    max_depth: int | None = typer.Option(None, "--max-depth", help="Tree depth cap"),
    max_iterations: int | None = typer.Option(None, "--max-iterations", help="Tree count / boosting rounds cap"),
    features: str | None = typer.Option(None, "--features", help="Comma-separated feature columns (default: all)"),
    validation: Path | None = _validation_option(directory=False),
    author: str | None = AUTHOR,
    description: str | None = DESCRIPTION,
    json_output: bool = JSON_OUTPUT,
) -> None:
    """Train a tabular classifier or regressor."""
    run_training(
        Modality.TABULAR,
        dataset,
        output,
        author=author,
        description=description,
        json_output=json_output,
        target_column=target,
        model_type=model_type,
        algorithm=algorithm,
        max_depth=max_depth,
        max_iterations=max_iterations,
        feature_columns=features,
        validation_data=validation,
    )


def object_detect(
    dataset: Path = typer.Argument(
        ..., exists=True, file_okay=False, help="Directory of images with an annotations.json"
    ),
    output: Path = OUTPUT,
    iterations: int | None = typer.Option(None, "--iterations", help="Training iterations (default: 500)"),
    batch_size: int | None = typer.Option(None, "--batch-size", help="Images per iteration (default: 8)"),
    validation: Path | None = _validation_option(directory=True),
    author: str | None = AUTHOR,
    description: str | None = DESCRIPTION,
    json_output: bool = JSON_OUTPUT,
) -> None:
    """Train an object detector."""
    run_training(
        Modality.OBJECT_DETECTION,
        dataset,
        output,
        author=author,
        description=description,
        json_output=json_output,
        max_iterations=iterations,
        batch_size=batch_size,
        validation_data=validation,
    )


def word_tag(
    dataset: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON or CSV table of tokens and tags"),
    output: Path = OUTPUT,
    token_column: str | None = typer.Option(None, "--token-column", help="Token column (default: tokens)"),
    label_column: str | None = typer.Option(None, "--label-column", help="Tag column (default: labels)"),
    language: str | None = typer.Option(None, "--language", help="Language code recorded with the model"),
    validation: Path | None = _validation_option(directory=False),
    author: str | None = AUTHOR,
    description: str | None = DESCRIPTION,
    json_output: bool = JSON_OUTPUT,
) -> None:
    """Train a word tagger."""
    run_training(
        Modality.WORD_TAGGING,
        dataset,
        output,
        author=author,
        description=description,
        json_output=json_output,
        token_column=token_column,
        label_column=label_column,
        language=language,
        validation_data=validation,
    )


def recommend(
    dataset: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV or JSON table of interactions"),
    output: Path = OUTPUT,
    user_column: str | None = typer.Option(None, "--user-column", help="User id column (default: user)"),
    item_column: str | None = typer.Option(None, "--item-column", help="Item id column (default: item)"),
    rating_column: str | None = typer.Option(
        None, "--rating-column", help="Rating column; omit for implicit feedback"
    ),
    validation: Path | None = _validation_option(directory=False),
    author: str | None = AUTHOR,
    description: str | None = DESCRIPTION,
    json_output: bool = JSON_OUTPUT,
) -> None:
    """Train a recommender."""
    run_training(
        Modality.RECOMMENDATION,
        dataset,
        output,
        author=author,
        description=description,
        json_output=json_output,
        user_column=user_column,
        item_column=item_column,
        rating_column=rating_column,
        validation_data=validation,
    )
