"""Error taxonomy for training runs.

Every failure a trainer surfaces is one of the classes below. The
``started`` flag tells the boundary whether training had begun: a run
either did not start (bad configuration, missing prerequisite), started
and failed, or succeeded. Nothing here is retried.
"""


class TrainkitError(Exception):
    """Base class for all training-run failures."""

    started: bool = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(TrainkitError):
    """A required parameter is missing or structurally invalid."""

    started = False


class PreconditionError(TrainkitError):
    """A known, checkable prerequisite is absent."""

    started = False


class MissingAnnotationsError(PreconditionError):
    """Object-detection data has no ``annotations.json`` next to the images."""


class DataLoadError(TrainkitError):
    """The dataset cannot be parsed into the shape the engine expects."""


class TrainingError(TrainkitError):
    """The fit call itself failed."""


class ArtifactWriteError(TrainkitError):
    """The trained model could not be persisted."""
