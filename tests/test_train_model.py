import math

import numpy as np
import pytest

from qos_amf.models.amf import FitState
from qos_amf.utils.train_model import DEFAULT_CONFIG, AMFTrainer


def test_rejects_unknown_config_keys():
    with pytest.raises(ValueError, match="Unknown config keys"):
        AMFTrainer({'learning_rate': 0.1})


@pytest.mark.parametrize("config", [{'dim': 0}, {'beta': 0.0}, {'beta': 1.5}])
def test_rejects_invalid_values(config):
    with pytest.raises(ValueError):
        AMFTrainer(config)


def test_defaults_are_filled_in():
    trainer = AMFTrainer({'dim': 4}, seed=0, verbose=False)
    assert trainer.config['dim'] == 4
    assert trainer.config['eta'] == DEFAULT_CONFIG['eta']


def test_unseeded_trainer_picks_a_seed():
    assert isinstance(AMFTrainer(verbose=False).seed, int)


def test_init_factors_shapes():
    factors = AMFTrainer({'dim': 3}, seed=0, verbose=False).init_factors(4, 5)
    assert factors['U'].shape == (4, 3)
    assert factors['S'].shape == (5, 3)
    assert factors['U'].dtype == np.float64
    assert not factors['p'].any() and not factors['q'].any()


def test_train_returns_dense_prediction(additive_matrix):
    observed = additive_matrix.copy()
    observed[0, :2] = 0.0
    trainer = AMFTrainer({'dim': 2, 'max_iter': 40}, seed=0, verbose=False)

    prediction, factors, result = trainer.train(observed)

    assert prediction.shape == observed.shape
    assert np.all((prediction > 0) & (prediction < 1))
    assert factors['U'].shape == (6, 2)
    assert result.num_samples == observed.size - 2
    assert result.state in (FitState.CONVERGED, FitState.MAX_ITER_REACHED)


def test_same_seed_same_prediction(additive_matrix):
    config = {'dim': 2, 'max_iter': 35}
    a, _, _ = AMFTrainer(config, seed=11, verbose=False).train(additive_matrix)
    b, _, _ = AMFTrainer(config, seed=11, verbose=False).train(additive_matrix)
    np.testing.assert_array_equal(a, b)


def test_train_rejects_non_2d_input():
    with pytest.raises(ValueError):
        AMFTrainer(seed=0, verbose=False).train(np.ones(4))


def test_run_experiment_reports_metrics(additive_matrix, capsys):
    raw = additive_matrix * 20.0
    trainer = AMFTrainer({'dim': 2, 'max_iter': 60}, seed=2)

    metrics = trainer.run_experiment(raw, density=0.5)

    assert set(metrics) == {"MAE", "NMAE", "RMSE", "MRE", "NPRE"}
    assert all(math.isfinite(v) and v >= 0 for v in metrics.values())
    assert "AMF@50%" in capsys.readouterr().out
