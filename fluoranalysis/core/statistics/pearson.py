"""Pearson correlation."""

from typing import Sequence

import numpy as np

from fluoranalysis.utils.validation import check_lengths


def pearson_correlation(data_a: Sequence[float], data_b: Sequence[float]) -> float:
    """Compute the Pearson correlation coefficient between two 1D arrays.

    Args:
        data_a: First array
        data_b: Second array, same length as ``data_a``

    Returns:
        Correlation coefficient between -1.0 and 1.0. NaN when the arrays
        are empty or either array has zero variance.

    Raises:
        MismatchedArrayLengthsError: If the arrays differ in length
    """
    check_lengths(data_a, "data_a", data_b, "data_b")

    a = np.asarray(data_a, dtype=np.float64)
    b = np.asarray(data_b, dtype=np.float64)
    if a.size == 0:
        return float('nan')

    diff_a = a - a.mean()
    diff_b = b - b.mean()

    denom = np.sqrt(np.sum(diff_a ** 2) * np.sum(diff_b ** 2))
    with np.errstate(invalid='ignore', divide='ignore'):
        return float(np.sum(diff_a * diff_b) / denom)
