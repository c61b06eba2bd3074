"""
Adaptive Matrix Factorization (AMF) for QoS prediction.

Learns user and service latent factors plus per-user/per-service biases that
reconstruct a sparse QoS matrix through a sigmoid link. Every observation is
applied by stochastic gradient descent, weighted by adaptive confidence
estimates of how reliable the user and the service have been so far.
"""

import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

import numpy as np
import torch
from tqdm import tqdm

from ..data.samples import Sample, extract_samples
from .numeric import (
    DenseMatrix,
    dot_product,
    grad_sigmoid,
    matrix_view,
    sigmoid,
    vector_view
)
from .loss import loss
from .prediction import get_pred_matrix

# Early stopping is never allowed before this many epochs
MIN_ITER = 30
INITIAL_LOSS = 1e10


class FitState(Enum):
    RUNNING = 'running'
    CONVERGED = 'converged'
    MAX_ITER_REACHED = 'max_iter_reached'
    DONE = 'done'


@dataclass
class FitResult:
    """Outcome of a fit: why it stopped, after how many epochs, at which loss."""
    state: FitState
    epochs: int
    loss: float
    num_samples: int
    history: Dict[str, List[float]] = field(default_factory=lambda: {'loss': []})


class AdaptiveMatrixFactorization:
    """
    Confidence-weighted SGD optimizer.

    Factors, biases and the prediction buffer are borrowed from the caller and
    updated in place. The confidence vectors are internal and start at 1.0.

    Args:
        observed: Observed QoS matrix, num_user x num_service
        U: User factors, num_user x dim
        S: Service factors, num_service x dim
        p: User biases, length num_user
        q: Service biases, length num_service
        pred: Prediction buffer, num_user x num_service
        lmda: L2 regularization strength
        max_iter: Hard epoch budget
        converge_threshold: Normalised loss at or below which fitting may stop
        eta: Learning rate
        beta: Confidence smoothing factor
        debug_mode: Write the loss of every epoch to stderr
        generator: Random source for the per-epoch shuffle
        symmetric_bias: Weight the service-bias gradient by the service
            confidence share. False applies the user share to both biases.
        progress: Show a tqdm bar over the epoch budget
    """

    def __init__(self,
                 observed: DenseMatrix,
                 U: DenseMatrix,
                 S: DenseMatrix,
                 p: np.ndarray,
                 q: np.ndarray,
                 pred: DenseMatrix,
                 *,
                 lmda: float,
                 max_iter: int,
                 converge_threshold: float,
                 eta: float,
                 beta: float,
                 debug_mode: bool = False,
                 generator: Optional[torch.Generator] = None,
                 symmetric_bias: bool = True,
                 progress: bool = False):
        self.observed = observed
        self.U = U
        self.S = S
        self.p = p
        self.q = q
        self.pred = pred

        self.lmda = lmda
        self.max_iter = max_iter
        self.converge_threshold = converge_threshold
        self.eta = eta
        self.beta = beta
        self.debug_mode = debug_mode
        self.symmetric_bias = symmetric_bias
        self.progress = progress
        self.generator = generator if generator is not None else torch.Generator()

        self.samples: List[Sample] = extract_samples(observed.data)
        self.eu = np.ones(U.rows, dtype=np.longdouble)
        self.es = np.ones(S.rows, dtype=np.longdouble)

        self.epoch = 0
        self.loss_value = INITIAL_LOSS
        self.state = FitState.RUNNING
        self.history = {'loss': []}

    def next_state(self) -> FitState:
        """State the optimizer moves to given the current epoch and loss."""
        if not (self.loss_value > self.converge_threshold or self.epoch < MIN_ITER):
            return FitState.CONVERGED
        if self.epoch >= self.max_iter:
            return FitState.MAX_ITER_REACHED
        return FitState.RUNNING

    def _update(self, sample: Sample) -> None:
        i, j, r_value = sample
        u_i = self.U.row(i)
        s_j = self.S.row(j)

        qos = dot_product(u_i, s_j) + self.p[i] + self.q[j]
        p_value = float(sigmoid(qos))
        err = p_value - r_value

        # confidence updates
        eij = np.longdouble(abs(err) / r_value)
        total = self.eu[i] + self.es[j]
        wi = self.eu[i] / total
        wj = self.es[j] / total
        self.eu[i] = self.beta * wi * eij + (1 - self.beta * wi) * self.eu[i]
        self.es[j] = self.beta * wj * eij + (1 - self.beta * wj) * self.es[j]

        # gradient descent updates, both gradients taken before either row moves
        grad = err * grad_sigmoid(qos)
        user_grad = float(wi * grad)
        service_grad = float(wj * grad)
        grad_u = user_grad * s_j + self.lmda * u_i
        grad_s = service_grad * u_i + self.lmda * s_j
        u_i -= self.eta * grad_u
        s_j -= self.eta * grad_s

        bias_grad = service_grad if self.symmetric_bias else user_grad
        self.p[i] -= self.eta * (user_grad + self.lmda * self.p[i])
        self.q[j] -= self.eta * (bias_grad + self.lmda * self.q[j])

    def run_epoch(self) -> float:
        """
        One shuffled pass over all samples.

        Returns:
            float: Loss normalised by the number of samples
        """
        order = torch.randperm(len(self.samples), generator=self.generator).tolist()
        for idx in order:
            self._update(self.samples[idx])

        get_pred_matrix(False, self.observed.data, self.U.data, self.S.data,
                        self.p, self.q, self.pred.data)
        self.loss_value = loss(self.U.data, self.S.data, self.p, self.q,
                               self.observed.data, self.pred.data, self.lmda)
        self.loss_value /= len(self.samples)
        self.history['loss'].append(self.loss_value)

        if self.debug_mode:
            timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
            tqdm.write(f"{timestamp}: iter = {self.epoch}, lossValue = {self.loss_value:.6f}",
                       file=sys.stderr)

        self.epoch += 1
        return self.loss_value

    def run(self) -> FitResult:
        """Fit until convergence or until the epoch budget is spent."""
        if not self.samples:
            # Nothing observed: keep the initial factors, predict everywhere once
            get_pred_matrix(True, self.observed.data, self.U.data, self.S.data,
                            self.p, self.q, self.pred.data)
            self.state = FitState.DONE
            return FitResult(FitState.DONE, 0, 0.0, 0, self.history)

        with tqdm(total=max(self.max_iter, 0), desc="AMF", leave=False,
                  disable=not self.progress) as pbar:
            self.state = self.next_state()
            while self.state is FitState.RUNNING:
                self.run_epoch()
                pbar.update(1)
                pbar.set_postfix(loss=f"{self.loss_value:.6f}")
                self.state = self.next_state()

        stop_reason = self.state
        get_pred_matrix(True, self.observed.data, self.U.data, self.S.data,
                        self.p, self.q, self.pred.data)
        self.state = FitState.DONE

        return FitResult(
            state=stop_reason,
            epochs=self.epoch,
            loss=float(self.loss_value),
            num_samples=len(self.samples),
            history=self.history
        )


def fit(observed,
        num_user: int,
        num_service: int,
        dim: int,
        lmda: float,
        max_iter: int,
        converge_threshold: float,
        eta: float,
        beta: float,
        debug_mode: bool,
        U: np.ndarray,
        S: np.ndarray,
        p: np.ndarray,
        q: np.ndarray,
        prediction: np.ndarray,
        generator: Optional[torch.Generator] = None,
        symmetric_bias: bool = True,
        progress: bool = False) -> FitResult:
    """
    Fit AMF on an observed QoS matrix, writing results into caller buffers.

    U, S, p, q carry the initial values in and the learned values out. The
    prediction buffer receives the full dense prediction, missing entries
    included. All output buffers must be float64, contiguous and sized for
    the given dimensions; they are written in place and never resized.

    Args:
        observed: QoS values, flat or 2D, |value| <= 1e-8 meaning missing
        num_user: Number of users (rows)
        num_service: Number of services (columns)
        dim: Latent dimensionality
        lmda: L2 regularization strength
        max_iter: Hard epoch budget
        converge_threshold: Normalised loss at or below which fitting may stop
        eta: Learning rate
        beta: Confidence smoothing factor
        debug_mode: Write the loss of every epoch to stderr
        U: User factors buffer (num_user * dim)
        S: Service factors buffer (num_service * dim)
        p: User bias buffer (num_user)
        q: Service bias buffer (num_service)
        prediction: Output buffer (num_user * num_service)
        generator: Random source for the shuffles. Seed it for reproducible fits.
        symmetric_bias: See AdaptiveMatrixFactorization
        progress: Show a progress bar

    Returns:
        FitResult: Stop reason, epochs run, final normalised loss and history

    Raises:
        ValueError: If a buffer cannot be addressed with the given dimensions
    """
    observed_data = np.asarray(observed, dtype=np.float64)
    if observed_data.size != num_user * num_service:
        raise ValueError(
            f"observed has {observed_data.size} entries, expected {num_user} x {num_service}"
        )
    observed_view = DenseMatrix(observed_data.reshape(num_user, num_service))

    views = {
        'U': matrix_view(U, num_user, dim),
        'S': matrix_view(S, num_service, dim),
        'p': vector_view(p, num_user),
        'q': vector_view(q, num_service),
        'prediction': matrix_view(prediction, num_user, num_service),
    }
    for name, view in views.items():
        if view is None:
            raise ValueError(
                f"{name} must be a contiguous float64 buffer sized for "
                f"num_user={num_user}, num_service={num_service}, dim={dim}"
            )

    model = AdaptiveMatrixFactorization(
        observed_view,
        views['U'],
        views['S'],
        views['p'],
        views['q'],
        views['prediction'],
        lmda=lmda,
        max_iter=max_iter,
        converge_threshold=converge_threshold,
        eta=eta,
        beta=beta,
        debug_mode=debug_mode,
        generator=generator,
        symmetric_bias=symmetric_bias,
        progress=progress
    )
    return model.run()
