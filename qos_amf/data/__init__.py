"""
Data Processing Module
=====================

Handles the QoS matrix before fitting:
- Extracting observed (user, service, value) samples
- Normalising raw QoS values into (0, 1]
- Splitting observations into train and test matrices by density
"""

from .samples import EPS, Sample, extract_samples, observed_mask
from .preprocessor import QoSPreprocessor, remove_entries

__all__ = [
    'EPS',
    'Sample',
    'extract_samples',
    'observed_mask',
    'QoSPreprocessor',
    'remove_entries',
]
