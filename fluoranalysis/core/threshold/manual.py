"""Manual (fixed value) thresholding."""

from typing import Any

import numpy as np

from fluoranalysis.utils.parallel import map_partitions, pixel_executor, resolve_workers


def _threshold_partition(flat: np.ndarray, threshold: Any, start: int, stop: int) -> np.ndarray:
    return flat[start:stop] >= threshold


def manual_mask(data: np.ndarray, threshold: Any, parallel: bool = False) -> np.ndarray:
    """Create a boolean mask of the pixels at or above ``threshold``.

    Args:
        data: n-dimensional image
        threshold: Threshold value
        parallel: Threshold partitions of the image on a thread pool

    Returns:
        Boolean array of the same shape as ``data``
    """
    data = np.asarray(data)
    flat = data.ravel()
    with pixel_executor(parallel, use_processes=False) as executor:
        parts = map_partitions(
            _threshold_partition, flat.size, executor, resolve_workers(), flat, threshold
        )
    if not parts:
        return np.zeros(data.shape, dtype=bool)
    return np.concatenate(parts).reshape(data.shape)
