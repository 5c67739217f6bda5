"""Minimum and maximum of n-dimensional data."""

from typing import Any, Tuple

import numpy as np

from fluoranalysis.utils.validation import check_not_empty


def min_max(data: np.ndarray) -> Tuple[Any, Any]:
    """Return the (min, max) of an array in its own element type.

    Raises:
        InvalidParameterError: If the array is empty
    """
    data = np.asarray(data)
    check_not_empty(data, "data")
    return data.min(), data.max()
