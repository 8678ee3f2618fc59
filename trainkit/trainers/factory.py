"""Factory for creating trainer instances per modality."""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trainkit.engine.base import TrainingEngine
    from trainkit.trainers.base import BaseTrainer


class Modality(str, Enum):
    """Available training modalities."""

    IMAGE = "image"
    TEXT = "text"
    SOUND = "sound"
    TABULAR = "tabular"
    OBJECT_DETECTION = "object_detection"
    WORD_TAGGING = "word_tagging"
    RECOMMENDATION = "recommendation"


class TrainerFactory:
    """Factory for creating trainer instances.

    Uses a decorator-based registry pattern. Trainers register themselves
    when ``trainkit.trainers.strategies`` is imported.

    Example:
        >>> from trainkit.trainers.factory import Modality, TrainerFactory
        >>> trainer = TrainerFactory.create(Modality.IMAGE)
        >>> result = trainer.train("data/pets", "pets.joblib")
    """

    _registry: dict[Modality, type["BaseTrainer"]] = {}

    @classmethod
    def register(cls, modality: Modality):
        """Decorator to register a trainer for a modality.

        Args:
            modality: The Modality enum value to register.

        Returns:
            Decorator function.
        """

        def decorator(trainer_class: type["BaseTrainer"]) -> type["BaseTrainer"]:
            cls._registry[modality] = trainer_class
            return trainer_class

        return decorator

    @classmethod
    def create(
        cls, modality: Modality | str, engine: "TrainingEngine | None" = None
    ) -> "BaseTrainer":
        """Create a trainer for a modality.

        Args:
            modality: Either a Modality enum or its string value.
            engine: Engine to train with. Defaults to the scikit-learn engine.

        Returns:
            A new trainer instance.

        Raises:
            ValueError: If the modality is unknown or has no registered trainer.
        """
        return cls.get_class(modality)(engine=engine)

    @classmethod
    def list_available(cls) -> list[str]:
        """List all registered modalities.

        Returns:
            List of modality identifiers.
        """
        return [m.value for m in cls._registry.keys()]

    @classmethod
    def get_class(cls, modality: Modality | str) -> type["BaseTrainer"]:
        """Get the trainer class for a modality without instantiating.

        Raises:
            ValueError: If the modality is unknown or has no registered trainer.
        """
        if isinstance(modality, str):
            try:
                modality = Modality(modality)
            except ValueError:
                available = cls.list_available()
                raise ValueError(
                    f"Unknown modality '{modality}'. Available: {available}"
                ) from None

        if modality not in cls._registry:
            available = cls.list_available()
            raise ValueError(f"Modality '{modality.value}' not registered. Available: {available}")

        return cls._registry[modality]
