"""CLI command to show model information."""

from pathlib import Path

import typer

from trainkit.artifacts.writer import read_artifact_metadata
from trainkit.cli.utils import console, create_labels_table, err_console, error_panel, info_panel


def info(
    model_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Model file written by trainkit"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Print the metadata as JSON only"),
) -> None:
    """Show the metadata stored in a trained model."""
    try:
        metadata = read_artifact_metadata(model_path)
    except (FileNotFoundError, ValueError) as exc:
        err_console.print(error_panel(str(exc)))
        raise typer.Exit(1) from exc

    if json_output:
        typer.echo(metadata.model_dump_json(indent=2))
        return

    lines = [
        f"[bold]Description:[/bold] {metadata.short_description}",
        f"[bold]Author:[/bold] {metadata.author}",
        f"[bold]Version:[/bold] {metadata.version}",
        f"[bold]Modality:[/bold] {metadata.modality}",
        f"[bold]Artifact ID:[/bold] {metadata.artifact_id[:8]}...",
        f"[bold]Created:[/bold] {metadata.created_at.isoformat()[:19]}",
    ]
    for name, value in metadata.training_metrics.items():
        lines.append(f"[bold]Training {name}:[/bold] {value:.4f}")
    for name, value in metadata.validation_metrics.items():
        lines.append(f"[bold]Validation {name}:[/bold] {value:.4f}")

    console.print(info_panel("\n".join(lines), title="Model Information"))

    if metadata.labels:
        console.print()
        console.print(create_labels_table(metadata.labels))

    if metadata.framework_versions:
        versions = ", ".join(f"{k} {v}" for k, v in sorted(metadata.framework_versions.items()))
        console.print(f"[dim]Built with {versions}[/dim]")
