"""Trainer strategies module.

Importing this module registers every modality's trainer with the TrainerFactory.
"""

from trainkit.trainers.strategies.image import ImageClassifierTrainer
from trainkit.trainers.strategies.object_detection import ObjectDetectorTrainer
from trainkit.trainers.strategies.recommender import RecommenderTrainer
from trainkit.trainers.strategies.sound import SoundClassifierTrainer
from trainkit.trainers.strategies.tabular import TabularTrainer
from trainkit.trainers.strategies.text import TextClassifierTrainer
from trainkit.trainers.strategies.word_tagging import WordTaggerTrainer

__all__ = [
    "ImageClassifierTrainer",
    "ObjectDetectorTrainer",
    "RecommenderTrainer",
    "SoundClassifierTrainer",
    "TabularTrainer",
    "TextClassifierTrainer",
    "WordTaggerTrainer",
]
