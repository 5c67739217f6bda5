"""Weighted sample statistics."""

from typing import Sequence

import numpy as np


def effective_sample_size(weights: Sequence[float]) -> float:
    """Compute the effective sample size (ESS) of a weighted sample set.

    ESS = (sum w)^2 / sum w^2

    Args:
        weights: Non-negative weights, one per sample

    Returns:
        The effective number of independent samples, or 0.0 if every weight
        is zero (or no weights are given)
    """
    weights = np.asarray(weights, dtype=np.float64)
    sum_sqr_w = float(np.sum(weights ** 2))
    if sum_sqr_w == 0.0:
        return 0.0
    return float(np.sum(weights)) ** 2 / sum_sqr_w
