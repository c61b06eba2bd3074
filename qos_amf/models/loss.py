"""Relative reconstruction loss with L2 regularization."""

import numpy as np

from ..data.samples import observed_mask


def loss(U, S, p, q, observed, pred, lmda: float) -> float:
    """
    Unnormalised training loss.

    Sums 0.5 * ((r - pred) / r)^2 over the observed entries and adds
    0.5 * lmda * ||.||^2 over every component of U, S, p and q. The caller
    divides by the number of samples.
    """
    observed = np.asarray(observed, dtype=np.float64)
    pred = np.asarray(pred, dtype=np.float64)
    mask = observed_mask(observed)

    r = observed[mask]
    cost = 0.5 * np.sum(np.square((r - pred[mask]) / r))

    penalty = sum(np.sum(np.square(np.asarray(x))) for x in (U, S, p, q))
    return float(cost + 0.5 * lmda * penalty)
