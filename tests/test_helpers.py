import math

import numpy as np
import pandas as pd
import pytest

from qos_amf.utils.helpers import create_training_summary, evaluate, plot_training_history


def test_evaluate_hand_computed_case():
    test = np.array([[1.0, 0.0], [0.0, 2.0]])
    pred = np.array([[1.5, 9.0], [9.0, 1.0]])

    metrics = evaluate(test, pred)

    assert metrics["MAE"] == pytest.approx(0.75)
    assert metrics["NMAE"] == pytest.approx(0.5)
    assert metrics["RMSE"] == pytest.approx(math.sqrt(0.625))
    assert metrics["MRE"] == pytest.approx(0.5)
    assert metrics["NPRE"] == pytest.approx(0.5)


def test_evaluate_empty_test_set_gives_nan():
    metrics = evaluate(np.zeros((2, 2)), np.ones((2, 2)))
    assert set(metrics) == {"MAE", "NMAE", "RMSE", "MRE", "NPRE"}
    assert all(math.isnan(v) for v in metrics.values())


def test_evaluate_rejects_shape_mismatch():
    with pytest.raises(ValueError):
        evaluate(np.ones((2, 2)), np.ones((2, 3)))


def test_training_summary(tmp_path):
    history = {'loss': [0.9, 0.4, 0.5]}
    save_path = tmp_path / "summary.csv"

    df = create_training_summary(history, "AMF", metrics={"MAE": 0.1}, save_path=str(save_path))

    row = df.iloc[0]
    assert row['Model'] == "AMF"
    assert row['Total Epochs'] == 3
    assert row['Final Loss'] == pytest.approx(0.5)
    assert row['Best Loss'] == pytest.approx(0.4)
    assert row['Best Epoch'] == 2
    assert row['MAE'] == pytest.approx(0.1)
    assert list(pd.read_csv(save_path).columns) == list(df.columns)


def test_training_summary_of_empty_history():
    df = create_training_summary({'loss': []}, "AMF")
    assert df.iloc[0]['Total Epochs'] == 0
    assert math.isnan(df.iloc[0]['Final Loss'])


def test_plot_training_history_saves_figure(tmp_path):
    save_path = tmp_path / "loss.png"
    plot_training_history({'loss': [1.0, 0.5, 0.2]}, save_path=str(save_path), show=False)
    assert save_path.exists()
