"""Metaball blob image simulation.

Both simulators follow Jim Blinn's metaballs idea: every blob contributes an
intensity that decays with the distance from its center, and the image is
built by combining the contributions at every pixel.
"""

from typing import Sequence, Tuple

import numpy as np

from fluoranalysis.core.errors import InvalidParameterError
from fluoranalysis.utils.validation import check_lengths


def _validate_blobs(
    centers: np.ndarray,
    radii: np.ndarray,
    intensities: np.ndarray,
    falloffs: np.ndarray,
    shape: Sequence[int]
) -> None:
    if centers.ndim != 2:
        raise InvalidParameterError("centers", "expected a (blobs, dimensions) array.")
    check_lengths(centers, "centers", radii, "radii")
    check_lengths(centers, "centers", intensities, "intensities")
    check_lengths(centers, "centers", falloffs, "falloffs")
    if centers.shape[1] != len(shape):
        raise InvalidParameterError(
            "centers",
            f"blob centers have {centers.shape[1]} dimensions but the image shape has {len(shape)}."
        )


def _squared_distances(center: np.ndarray, grid: Tuple[np.ndarray, ...]) -> np.ndarray:
    dist_sq = np.zeros(grid[0].shape, dtype=np.float64)
    for axis_coords, c in zip(grid, center):
        dist_sq = dist_sq + (axis_coords - c) ** 2
    return dist_sq


def gaussian_metaballs(
    centers: Sequence[Sequence[float]],
    radii: Sequence[float],
    intensities: Sequence[float],
    falloffs: Sequence[float],
    background: float,
    shape: Sequence[int]
) -> np.ndarray:
    """Create an n-dimensional Gaussian metaballs image.

    Each pixel is the background plus the *sum* of
    ``intensity * exp(-d^2 / (falloff * radius^2))`` over all blobs, which
    gives smooth borders and lets nearby blobs fuse.

    Args:
        centers: (blobs, dimensions) blob center coordinates
        radii: Blob radii
        intensities: Blob peak intensities
        falloffs: Per-blob decay control; larger values blur the border
        background: Background intensity
        shape: Output image shape

    Returns:
        float64 array of ``shape``

    Raises:
        MismatchedArrayLengthsError: If the per-blob arrays differ in length
        InvalidParameterError: If the center dimensionality does not match ``shape``
    """
    centers = np.asarray(centers, dtype=np.float64)
    radii = np.asarray(radii, dtype=np.float64)
    intensities = np.asarray(intensities, dtype=np.float64)
    falloffs = np.asarray(falloffs, dtype=np.float64)
    _validate_blobs(centers, radii, intensities, falloffs, shape)

    grid = np.indices(tuple(shape), dtype=np.float64)
    image = np.full(tuple(shape), float(background), dtype=np.float64)
    for center, radius, intensity, falloff in zip(centers, radii, intensities, falloffs):
        dist_sq = _squared_distances(center, grid)
        image += intensity * np.exp(-dist_sq / (falloff * radius * radius))

    return image


def logistic_metaballs(
    centers: Sequence[Sequence[float]],
    radii: Sequence[float],
    intensities: Sequence[float],
    falloffs: Sequence[float],
    background: float,
    shape: Sequence[int]
) -> np.ndarray:
    """Create an n-dimensional logistic metaballs image.

    Each pixel is the *maximum* of the background and
    ``intensity / (1 + exp((d - radius) / falloff))`` over all blobs, so
    neighboring blobs deform against each other instead of fusing.

    Args:
        centers: (blobs, dimensions) blob center coordinates
        radii: Blob radii
        intensities: Blob peak intensities
        falloffs: Per-blob transition width; small values give crisp edges
        background: Background intensity
        shape: Output image shape

    Returns:
        float64 array of ``shape``

    Raises:
        MismatchedArrayLengthsError: If the per-blob arrays differ in length
        InvalidParameterError: If the center dimensionality does not match ``shape``
    """
    centers = np.asarray(centers, dtype=np.float64)
    radii = np.asarray(radii, dtype=np.float64)
    intensities = np.asarray(intensities, dtype=np.float64)
    falloffs = np.asarray(falloffs, dtype=np.float64)
    _validate_blobs(centers, radii, intensities, falloffs, shape)

    grid = np.indices(tuple(shape), dtype=np.float64)
    image = np.full(tuple(shape), float(background), dtype=np.float64)
    for center, radius, intensity, falloff in zip(centers, radii, intensities, falloffs):
        dist = np.sqrt(_squared_distances(center, grid))
        k = max(falloff, 1e-12)
        with np.errstate(over='ignore'):
            soft = 1.0 / (1.0 + np.exp((dist - radius) / k))
        image = np.maximum(image, intensity * soft)

    return image
