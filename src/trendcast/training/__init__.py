"""Training orchestration."""

from .trainer import ModelTrainer, TrainingRun

__all__ = ['ModelTrainer', 'TrainingRun']
