"""
Turns a sparse observed QoS matrix into (user, service, value) training samples.
"""

from typing import List, NamedTuple

import numpy as np

# Entries with an absolute value at or below EPS are treated as missing
EPS = 1e-8


class Sample(NamedTuple):
    user: int
    service: int
    value: float


def observed_mask(observed, eps: float = EPS) -> np.ndarray:
    """Boolean mask of the entries that hold a real observation."""
    return np.abs(np.asarray(observed)) > eps


def extract_samples(observed, eps: float = EPS) -> List[Sample]:
    """
    Collect one Sample per observed entry, in row-major order.

    Args:
        observed: 2D array (or DenseMatrix) of QoS values, near-zero meaning missing
        eps: Threshold below which an entry counts as missing

    Returns:
        list: Samples; empty when nothing is observed
    """
    matrix = np.asarray(observed)
    users, services = np.nonzero(observed_mask(matrix, eps))
    return [
        Sample(int(i), int(j), float(matrix[i, j]))
        for i, j in zip(users, services)
    ]
