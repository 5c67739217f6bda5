"""Input validation helpers shared by the analysis modules."""

from typing import Any, Optional, Sequence

import numpy as np

from fluoranalysis.config.settings import SUPPORTED_DTYPES
from fluoranalysis.core.errors import (
    InvalidParameterError,
    MismatchedArrayLengthsError,
    MismatchedArrayShapesError,
)

SUPPORTED_DTYPE_NAMES = ", ".join(np.dtype(t).name for t in SUPPORTED_DTYPES)


def check_lengths(a: Sequence, a_name: str, b: Sequence, b_name: str) -> None:
    """Raise MismatchedArrayLengthsError if ``len(a) != len(b)``."""
    if len(a) != len(b):
        raise MismatchedArrayLengthsError(a_name, len(a), b_name, len(b))


def check_shapes(a: np.ndarray, a_name: str, b: np.ndarray, b_name: str) -> None:
    """Raise MismatchedArrayShapesError if the two arrays differ in shape."""
    if a.shape != b.shape:
        raise MismatchedArrayShapesError(a_name, a.shape, b_name, b.shape)


def check_not_empty(data: np.ndarray, name: str) -> None:
    if data.size == 0:
        raise InvalidParameterError(name, "the array can not be empty.")


def check_image(image: Any, name: str, ndim: Optional[int] = None) -> np.ndarray:
    """Validate an image against the supported element types.

    Args:
        image: Array-like image
        name: Parameter name used in error messages
        ndim: Required number of dimensions, or None for any

    Returns:
        The image as a numpy array (no copy when already an ndarray)

    Raises:
        TypeError: If the element type is not in the dispatch table
        InvalidParameterError: If the dimensionality is wrong
    """
    image = np.asarray(image)
    if image.dtype.type not in SUPPORTED_DTYPES:
        raise TypeError(
            f"Unsupported array dtype {image.dtype.name} for \"{name}\", "
            f"supported array dtypes are {SUPPORTED_DTYPE_NAMES}."
        )
    if ndim is not None and image.ndim != ndim:
        raise InvalidParameterError(
            name, f"expected a {ndim}-dimensional array but got {image.ndim} dimensions."
        )
    return image


def cast_threshold(threshold: float, dtype: np.dtype) -> float:
    """Convert a threshold to the image element type, then to float64.

    Integer images truncate fractional thresholds the same way a C cast does.
    Thresholds outside an integer type's range are returned unchanged instead
    of wrapping, so one below the minimum gates no pixel and one above the
    maximum gates every pixel.
    """
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        if not info.min <= threshold <= info.max:
            return float(threshold)
    return float(np.asarray(threshold).astype(dtype))
