"""Trainer abstraction layer: parameters, algorithm selection and results.

Trainers themselves live in ``trainkit.trainers.strategies``; importing that
module registers them with the TrainerFactory.
"""

from trainkit.trainers.algorithms import Algorithm, AlgorithmKind, TextAlgorithm, select_algorithm
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.parameters import TrainingParameters, normalize_parameters

__all__ = [
    "Algorithm",
    "AlgorithmKind",
    "Modality",
    "TextAlgorithm",
    "TrainerFactory",
    "TrainingParameters",
    "normalize_parameters",
    "select_algorithm",
]
