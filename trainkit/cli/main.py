"""Main CLI application for trainkit."""

from enum import Enum

import typer

from trainkit.cli import info, train
from trainkit.config import get_settings
from trainkit.logging_config import setup_logging

app = typer.Typer(
    name="trainkit",
    help="trainkit - train image, text, sound, tabular, detection, tagging and recommender models",
    add_completion=False,
    no_args_is_help=True,
)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@app.callback()
def main(
    log_level: LogLevel | None = typer.Option(
        None, "--log-level", case_sensitive=False, help="Log level for stderr output"
    ),
    log_json: bool = typer.Option(False, "--log-json", help="Emit logs as JSON"),
) -> None:
    """Configure logging before any command runs."""
    settings = get_settings()
    setup_logging(
        level=log_level.value if log_level is not None else settings.log_level,
        json_format=log_json or settings.log_json,
    )


# Register commands
app.command(name="image", help="Train an image classifier")(train.image)
app.command(name="text", help="Train a text classifier")(train.text)
app.command(name="sound", help="Train a sound classifier")(train.sound)
app.command(name="tabular", help="Train a tabular classifier or regressor")(train.tabular)
app.command(name="object-detect", help="Train an object detector")(train.object_detect)
app.command(name="word-tag", help="Train a word tagger")(train.word_tag)
app.command(name="recommend", help="Train a recommender")(train.recommend)
app.command(name="info", help="Show metadata of a trained model")(info.info)


if __name__ == "__main__":
    app()
