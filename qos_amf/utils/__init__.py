"""
Utility Functions and Classes
===========================

Provides supporting functionality for AMF:
- Training driver with configuration and seeding
- Evaluation metrics
- Training summaries and loss plots
"""

from .helpers import evaluate, plot_training_history, create_training_summary
from .train_model import AMFTrainer, DEFAULT_CONFIG

__all__ = [
    'evaluate',
    'plot_training_history',
    'create_training_summary',
    'AMFTrainer',
    'DEFAULT_CONFIG',
]
