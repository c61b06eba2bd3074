"""
Preprocessing for raw QoS matrices: normalisation into (0, 1] and the
random density split used to simulate sparse observations.
"""

from typing import Optional, Tuple

import numpy as np
import torch

from .samples import EPS


class QoSPreprocessor:
    """
    Scales a raw QoS matrix into (0, 1] so it matches the sigmoid link.

    Negative values (``-1`` is the usual "not measured" marker in QoS
    datasets) are treated as missing and set to 0.
    """

    def __init__(self):
        self.max_value: Optional[float] = None

    def normalize(self, matrix) -> np.ndarray:
        """Return a normalised copy of ``matrix`` and remember its maximum."""
        data = np.array(matrix, dtype=np.float64)
        data[data < 0] = 0
        max_value = float(data.max()) if data.size else 0.0
        if max_value <= EPS:
            raise ValueError("QoS matrix has no positive entries to normalise by")

        self.max_value = max_value
        return data / max_value

    def denormalize(self, pred) -> np.ndarray:
        """Map normalised predictions back to the original QoS scale."""
        if self.max_value is None:
            raise ValueError("normalize must be called before denormalize")
        return np.asarray(pred, dtype=np.float64) * self.max_value


def remove_entries(
    matrix,
    density: float,
    generator: Optional[torch.Generator] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split the observed entries of ``matrix`` into a train and a test matrix.

    A random ``density`` fraction of all matrix positions is kept for
    training; observed values outside that fraction go to the test matrix.
    Both results use 0 for "missing".

    Args:
        matrix: QoS matrix, 0 (or |x| <= EPS) meaning missing
        density: Fraction of positions kept for training, in (0, 1]
        generator: Random source for the split

    Returns:
        tuple: (train_matrix, test_matrix)
    """
    if not 0 < density <= 1:
        raise ValueError(f"density must be in (0, 1], got {density}")

    data = np.array(matrix, dtype=np.float64)
    num_entries = data.size
    num_train = int(round(num_entries * density))

    perm = torch.randperm(num_entries, generator=generator).numpy()
    keep = np.zeros(num_entries, dtype=bool)
    keep[perm[:num_train]] = True
    keep = keep.reshape(data.shape)

    observed = np.abs(data) > EPS
    train = np.where(keep & observed, data, 0.0)
    test = np.where(~keep & observed, data, 0.0)
    return train, test
