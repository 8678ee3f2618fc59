"""Tests for the trainer factory.

Justification: the factory is the entry point for creating trainers. If a
modality is missing from the registry, its CLI command cannot run at all.
"""

import pytest
from conftest import FakeEngine

import trainkit.trainers.strategies  # noqa: F401
from trainkit.trainers.base import BaseTrainer
from trainkit.trainers.factory import Modality, TrainerFactory
from trainkit.trainers.parameters import PARAMETERS_BY_MODALITY


class TestTrainerFactory:
    def test_every_modality_is_registered(self):
        assert sorted(TrainerFactory.list_available()) == sorted(m.value for m in Modality)

    def test_create_with_valid_string(self):
        trainer = TrainerFactory.create("image", engine=FakeEngine())

        assert isinstance(trainer, BaseTrainer)
        assert trainer.modality is Modality.IMAGE

    def test_create_with_valid_enum(self):
        trainer = TrainerFactory.create(Modality.WORD_TAGGING, engine=FakeEngine())

        assert trainer.modality is Modality.WORD_TAGGING

    def test_engine_is_injected(self):
        engine = FakeEngine()

        assert TrainerFactory.create(Modality.TEXT, engine=engine).engine is engine

    def test_default_engine_is_sklearn(self):
        from trainkit.engine.sklearn import SklearnEngine

        assert isinstance(TrainerFactory.create(Modality.SOUND).engine, SklearnEngine)

    def test_create_with_invalid_string_raises(self):
        with pytest.raises(ValueError, match="Unknown modality"):
            TrainerFactory.create("video")

    @pytest.mark.parametrize("modality", list(Modality))
    def test_trainer_uses_modality_parameter_record(self, modality):
        trainer_class = TrainerFactory.get_class(modality)

        assert trainer_class.parameters_class is PARAMETERS_BY_MODALITY[modality]
        assert trainer_class.modality is modality
