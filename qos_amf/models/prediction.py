"""Dense prediction matrix from the current factors and biases."""

import numpy as np

from ..data.samples import observed_mask
from .numeric import sigmoid

_LOWEST = np.nextafter(0.0, 1.0)
_HIGHEST = np.nextafter(1.0, 0.0)


def get_pred_matrix(full: bool, observed, U, S, p, q, out) -> np.ndarray:
    """
    Write sigmoid(p[i] + q[j] + U[i].S[j]) into ``out``.

    Args:
        full: If True fill every entry, otherwise only the observed ones
        observed: Observed QoS matrix (num_user x num_service)
        U: User factors (num_user x dim)
        S: Service factors (num_service x dim)
        p: User biases
        q: Service biases
        out: Caller-owned num_user x num_service array, written in place

    Returns:
        np.ndarray: ``out``
    """
    out = np.asarray(out)
    U = np.asarray(U, dtype=np.longdouble)
    S = np.asarray(S, dtype=np.longdouble)

    qos = U @ S.T
    qos += np.asarray(p, dtype=np.longdouble)[:, None]
    qos += np.asarray(q, dtype=np.longdouble)[None, :]
    # float64 rounds sigmoid to exactly 0 or 1 once |qos| passes ~37
    pred = np.clip(sigmoid(qos).astype(np.float64), _LOWEST, _HIGHEST)

    if full:
        out[...] = pred
    else:
        np.copyto(out, pred, where=observed_mask(observed))
    return out
