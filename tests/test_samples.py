import numpy as np

from qos_amf.data.samples import Sample, extract_samples, observed_mask


def test_extracts_observed_entries_row_major():
    observed = np.array([[0.5, 0.0, 0.2], [0.0, 0.0, 0.9]])
    assert extract_samples(observed) == [
        Sample(0, 0, 0.5),
        Sample(0, 2, 0.2),
        Sample(1, 2, 0.9),
    ]


def test_near_zero_entries_are_missing_but_negative_values_are_kept():
    observed = np.array([[1e-9, -0.3], [2e-8, -1e-10]])
    samples = extract_samples(observed)
    assert [(s.user, s.service) for s in samples] == [(0, 1), (1, 0)]
    np.testing.assert_array_equal(observed_mask(observed), [[False, True], [True, False]])


def test_empty_when_nothing_is_observed():
    assert extract_samples(np.zeros((3, 4))) == []


def test_scenario_matrix_yields_two_samples():
    samples = extract_samples(np.array([[0.5, 0.0], [0.0, 0.5]]))
    assert len(samples) == 2
    assert all(isinstance(s.user, int) and isinstance(s.value, float) for s in samples)
