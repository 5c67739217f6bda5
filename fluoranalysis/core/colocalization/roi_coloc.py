"""Per-ROI Pearson colocalization."""

from typing import Dict, Tuple

import numpy as np

from fluoranalysis.core.errors import InvalidParameterError
from fluoranalysis.core.statistics.pearson import pearson_correlation
from fluoranalysis.utils.parallel import pixel_executor
from fluoranalysis.utils.validation import check_image, check_shapes


def _roi_pearson(
    data_a: np.ndarray,
    data_b: np.ndarray,
    label: int,
    coords: np.ndarray
) -> Tuple[int, float]:
    index = tuple(np.asarray(coords, dtype=np.int64).T)
    return label, pearson_correlation(data_a[index], data_b[index])


def pearson_roi_coloc(
    data_a: np.ndarray,
    data_b: np.ndarray,
    rois: Dict[int, np.ndarray],
    parallel: bool = False
) -> Dict[int, float]:
    """Compute the Pearson correlation coefficient inside each ROI.

    Args:
        data_a: First n-dimensional image
        data_b: Second n-dimensional image, same shape as ``data_a``
        rois: Mapping of ROI label to a (pixels, dimensions) coordinate array,
            e.g. from ``rois_from_labels``
        parallel: Evaluate ROIs on a thread pool

    Returns:
        Mapping of ROI label to Pearson's r

    Raises:
        MismatchedArrayShapesError: If the image shapes differ
        InvalidParameterError: If an ROI's dimensionality does not match the images
    """
    data_a = check_image(data_a, "data_a")
    data_b = check_image(data_b, "data_b")
    check_shapes(data_a, "data_a", data_b, "data_b")

    for label, coords in rois.items():
        coords = np.asarray(coords)
        if coords.ndim != 2 or coords.shape[1] != data_a.ndim:
            raise InvalidParameterError(
                "rois", f"ROI {label} must be a (pixels, {data_a.ndim}) coordinate array."
            )

    with pixel_executor(parallel, use_processes=False) as executor:
        if executor is None:
            results = [_roi_pearson(data_a, data_b, label, coords) for label, coords in rois.items()]
        else:
            futures = [
                executor.submit(_roi_pearson, data_a, data_b, label, coords)
                for label, coords in rois.items()
            ]
            results = [future.result() for future in futures]

    return dict(results)
