"""Significance masking of SACA z-score fields."""

import logging
from typing import Optional

import numpy as np
from scipy import stats

from fluoranalysis.config.settings import DEFAULT_SIGNIFICANCE
from fluoranalysis.core.errors import InvalidParameterError
from fluoranalysis.utils.parallel import map_partitions, pixel_executor, resolve_workers

logger = logging.getLogger(__name__)


def bonferroni_critical_value(n_tests: int, alpha: float) -> float:
    """Two-sided critical z-value for ``n_tests`` simultaneous tests.

    Evaluated as the upper-tail quantile ``norm.isf(alpha / (2 * n_tests))``,
    which keeps full precision for large pixel counts.
    """
    return float(stats.norm.isf(alpha / (2.0 * n_tests)))


def _mask_partition(flat: np.ndarray, z_crit: float, start: int, stop: int) -> np.ndarray:
    chunk = flat[start:stop]
    # NaN compares False, so undefined pixels are never significant
    with np.errstate(invalid='ignore'):
        return np.abs(chunk) > z_crit


def saca_significance_mask(
    data: np.ndarray,
    alpha: Optional[float] = None,
    parallel: bool = False
) -> np.ndarray:
    """Create a significant pixel mask from a pixel-wise z-score array.

    A pixel is significant when ``|z|`` exceeds the Bonferroni corrected
    critical value for as many tests as there are pixels.

    Args:
        data: z-score array, e.g. from ``saca_2d`` or ``saca_3d``
        alpha: Significance level (maximum type I error). Defaults to 0.05.
        parallel: Evaluate partitions of the array on a thread pool

    Returns:
        Boolean array of the same shape; NaN z-scores map to False

    Raises:
        InvalidParameterError: If alpha is not in (0, 1)

    Reference:
        https://doi.org/10.1109/TIP.2019.2909194
    """
    data = np.asarray(data, dtype=np.float64)
    if alpha is None:
        alpha = DEFAULT_SIGNIFICANCE["alpha"]
    if not 0.0 < alpha < 1.0:
        raise InvalidParameterError("alpha", f"must be between 0.0 and 1.0 (exclusive) but got {alpha}.")

    if data.size == 0:
        return np.zeros(data.shape, dtype=bool)

    z_crit = bonferroni_critical_value(data.size, alpha)
    logger.debug(f"Bonferroni critical value for {data.size} pixels at alpha={alpha}: {z_crit}")

    flat = data.ravel()
    with pixel_executor(parallel, use_processes=False) as executor:
        parts = map_partitions(_mask_partition, flat.size, executor, resolve_workers(), flat, z_crit)

    return np.concatenate(parts).reshape(data.shape)
