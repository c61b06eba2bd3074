"""
Model Implementations
====================

Contains the adaptive matrix factorization model:
- Confidence-weighted SGD optimizer and its fit entry point
- Relative reconstruction loss
- Prediction generator for observed-only or full matrices
- Numeric primitives and the dense matrix view
"""

from .amf import AdaptiveMatrixFactorization, FitResult, FitState, MIN_ITER, fit
from .loss import loss
from .prediction import get_pred_matrix
from .numeric import (
    DenseMatrix,
    dot_product,
    grad_sigmoid,
    matrix_view,
    sigmoid,
    vector_view
)

__all__ = [
    'AdaptiveMatrixFactorization',
    'FitResult',
    'FitState',
    'MIN_ITER',
    'fit',
    'loss',
    'get_pred_matrix',
    'DenseMatrix',
    'dot_product',
    'grad_sigmoid',
    'matrix_view',
    'sigmoid',
    'vector_view',
]
