import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
import torch


@pytest.fixture
def generator():
    return torch.Generator().manual_seed(1234)


@pytest.fixture
def additive_matrix():
    """Full 6 x 5 matrix whose logits are exactly user offset + service offset."""
    a = np.linspace(-1.0, 1.0, 6)
    b = np.linspace(-0.5, 0.5, 5)
    return 1 / (1 + np.exp(-(a[:, None] + b[None, :])))


@pytest.fixture
def scenario_buffers():
    """2 x 2 diagonal scenario with dim=1 and fixed starting factors."""
    return {
        'observed': np.array([[0.5, 0.0], [0.0, 0.5]]),
        'U': np.array([[0.5], [0.4]]),
        'S': np.array([[0.6], [0.5]]),
        'p': np.zeros(2),
        'q': np.zeros(2),
        'prediction': np.zeros((2, 2)),
    }
