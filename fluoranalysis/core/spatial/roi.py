"""Regions of interest as point clouds."""

from typing import Dict

import numpy as np
from skimage import measure


def rois_from_labels(label_image: np.ndarray) -> Dict[int, np.ndarray]:
    """Convert a label image into ROI point clouds.

    Args:
        label_image: 2D or 3D integer array where each object has a unique
            label and 0 is background

    Returns:
        Dictionary mapping each label to a (pixels, dimensions) array of the
        integer coordinates belonging to it
    """
    label_image = np.asarray(label_image)
    if not np.issubdtype(label_image.dtype, np.integer):
        label_image = label_image.astype(np.int64)

    return {int(props.label): props.coords for props in measure.regionprops(label_image)}
