"""
QoS Prediction with Adaptive Matrix Factorization
================================================

Imputes missing entries of a sparse user x service quality-of-service matrix:
- Confidence-weighted SGD matrix factorization with a sigmoid link
- Relative-error loss with L2 regularization
- Dense prediction of every user/service pair

This package provides tools for:
- Normalising and splitting QoS matrices
- Fitting AMF into caller-owned buffers
- Evaluating and summarising predictions
"""

from . import data
from . import models
from . import utils

__all__ = [
    'data',
    'models',
    'utils',
]
