"""
Training driver for AMF QoS prediction.
Owns the configuration, the random source and the buffer allocation around the core fit.
"""

import time
from typing import Dict, Optional, Tuple

import numpy as np
import torch

from ..data.preprocessor import QoSPreprocessor, remove_entries
from ..models.amf import FitResult, fit
from .helpers import create_training_summary, evaluate


DEFAULT_CONFIG = {
    'dim': 10,
    'lmda': 0.001,
    'max_iter': 300,
    'converge_threshold': 5e-3,
    'eta': 0.8,
    'beta': 0.3,
    'init_std': 0.01,
    'symmetric_bias': True,
    'debug_mode': False,
    'progress': False,
}


class AMFTrainer:
    """Handles training and evaluation of AMF models."""

    def __init__(self, config: Optional[Dict] = None, seed: Optional[int] = None, verbose: bool = True):
        """
        Initialize the trainer.

        Args:
            config (dict): Overrides for DEFAULT_CONFIG
            seed (int): Seed for the random source; wall-clock time when None
            verbose (bool): Whether to print progress messages
        """
        config = config or {}
        unknown = set(config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        self.config = {**DEFAULT_CONFIG, **config}
        if self.config['dim'] < 1:
            raise ValueError(f"dim must be at least 1, got {self.config['dim']}")
        if not 0 < self.config['beta'] <= 1:
            raise ValueError(f"beta must be in (0, 1], got {self.config['beta']}")

        self.seed = seed if seed is not None else time.time_ns()
        self.generator = torch.Generator().manual_seed(self.seed)
        self.verbose = verbose

    def init_factors(self, num_user: int, num_service: int) -> Dict[str, np.ndarray]:
        """Allocate U, S (small normal values) and zero biases."""
        dim = self.config['dim']
        std = self.config['init_std']
        U = torch.randn(num_user, dim, generator=self.generator, dtype=torch.float64) * std
        S = torch.randn(num_service, dim, generator=self.generator, dtype=torch.float64) * std
        return {
            'U': U.numpy(),
            'S': S.numpy(),
            'p': np.zeros(num_user),
            'q': np.zeros(num_service),
        }

    def train(self, observed) -> Tuple[np.ndarray, Dict[str, np.ndarray], FitResult]:
        """
        Fit AMF on a normalised observed matrix.

        Args:
            observed: num_user x num_service matrix with values in (0, 1], 0 meaning missing

        Returns:
            tuple: (prediction, factors, fit_result)
        """
        observed = np.asarray(observed, dtype=np.float64)
        if observed.ndim != 2:
            raise ValueError(f"observed must be 2D, got {observed.ndim}D")
        num_user, num_service = observed.shape

        factors = self.init_factors(num_user, num_service)
        prediction = np.zeros((num_user, num_service))

        if self.verbose:
            print(f"Training AMF on {num_user:,} users x {num_service:,} services "
                  f"(seed={self.seed})")

        result = fit(
            observed, num_user, num_service, self.config['dim'],
            self.config['lmda'], self.config['max_iter'],
            self.config['converge_threshold'], self.config['eta'],
            self.config['beta'], self.config['debug_mode'],
            factors['U'], factors['S'], factors['p'], factors['q'], prediction,
            generator=self.generator,
            symmetric_bias=self.config['symmetric_bias'],
            progress=self.config['progress']
        )

        if self.verbose:
            print(f"Stopped ({result.state.value}) after {result.epochs} epochs, "
                  f"{result.num_samples:,} samples, loss={result.loss:.6f}")

        return prediction, factors, result

    def run_experiment(self, matrix, density: float) -> Dict[str, float]:
        """
        Normalise a raw QoS matrix, hide part of it, train and evaluate.

        Args:
            matrix: Raw QoS matrix (negative or zero meaning not measured)
            density: Fraction of entries kept for training

        Returns:
            dict: Evaluation metrics on the hidden entries, original scale
        """
        preprocessor = QoSPreprocessor()
        normalized = preprocessor.normalize(matrix)
        train_matrix, test_matrix = remove_entries(normalized, density, self.generator)

        prediction, _, result = self.train(train_matrix)

        metrics = evaluate(
            preprocessor.denormalize(test_matrix),
            preprocessor.denormalize(prediction)
        )
        if self.verbose:
            print(create_training_summary(result.history, f"AMF@{density:.0%}", metrics).to_string(index=False))
        return metrics
