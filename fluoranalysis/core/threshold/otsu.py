"""Otsu's automatic threshold."""

import logging
from typing import Any, Optional

import numpy as np
from skimage import filters

from fluoranalysis.core.errors import InvalidParameterError
from fluoranalysis.core.statistics.min_max import min_max
from fluoranalysis.core.threshold.manual import manual_mask

logger = logging.getLogger(__name__)


def otsu_value(data: np.ndarray, bins: Optional[int] = None) -> Any:
    """Compute an image threshold with Otsu's method.

    The threshold maximises the between-class variance of the assumed bimodal
    intensity histogram.

    Args:
        data: n-dimensional image
        bins: Number of histogram bins. Defaults to 256.

    Returns:
        The threshold in the image's element type (integer images truncate)

    Raises:
        InvalidParameterError: If the image is empty or ``bins == 0``

    Reference:
        https://doi.org/10.1109/TSMC.1979.4310076
    """
    data = np.asarray(data)
    if bins is None:
        bins = 256
    if bins <= 0:
        raise InvalidParameterError("bins", f"the bin count must be greater than 0 but got {bins}.")

    # a constant image has a single class, its value is the only threshold
    lo, hi = min_max(data)
    if lo == hi:
        return data.dtype.type(data.flat[0])

    threshold = filters.threshold_otsu(data, nbins=bins)
    logger.debug(f"Otsu threshold with {bins} bins: {threshold}")

    return np.asarray(threshold).astype(data.dtype)[()]


def otsu_mask(data: np.ndarray, bins: Optional[int] = None, parallel: bool = False) -> np.ndarray:
    """Create a boolean mask of the pixels at or above the Otsu threshold.

    Args:
        data: n-dimensional image
        bins: Number of histogram bins. Defaults to 256.
        parallel: Threshold partitions of the image on a thread pool

    Returns:
        Boolean array of the same shape as ``data``
    """
    threshold = otsu_value(data, bins)
    return manual_mask(data, threshold, parallel)
