"""Adaptive neighborhood engine for SACA.

One call to ``adaptive_pass`` performs a single propagation-separation
iteration for a contiguous range of pixels. Each pixel gathers a circular
(2D) or spherical (3D) neighborhood, weights it by distance from the center,
by how similar the neighbors' previous estimates are to the center's, and by
the per-channel intensity thresholds, then scores it with the weighted
Kendall's Tau-b.

Every pass only reads the previous iteration's state and writes new values
for its own pixel range, so partitions can run in any order or in separate
processes and still produce the same numbers.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from fluoranalysis.core.statistics.kendall_tau import weighted_kendall_tau_b_correlation
from fluoranalysis.core.statistics.sample import effective_sample_size


@dataclass(frozen=True)
class Kernel:
    """Integer offsets within a radius and their spatial weights."""

    radius: int
    offsets: np.ndarray
    weights: np.ndarray


def kernel_offsets(radius: int, ndim: int) -> Tuple[np.ndarray, np.ndarray]:
    """Enumerate all integer offsets with Euclidean norm <= radius.

    Args:
        radius: Kernel radius in pixels
        ndim: Number of image dimensions (2 or 3)

    Returns:
        Tuple of ((k, ndim) int64 offsets, (k,) float64 distances), ordered
        row-major over the bounding box
    """
    span = np.arange(-radius, radius + 1)
    grid = np.stack(np.meshgrid(*([span] * ndim), indexing='ij'), axis=-1).reshape(-1, ndim)
    distances = np.sqrt(np.sum(grid.astype(np.float64) ** 2, axis=1))
    inside = distances <= radius
    return grid[inside].astype(np.int64), distances[inside]


def spatial_weights(distances: np.ndarray, radius: int, kernel_scale: float, falloff: str) -> np.ndarray:
    """Distance-decaying weights, 1.0 at the center.

    ``linear`` decays as ``1 - d / (radius * kernel_scale)``, clipped at 0;
    ``gaussian`` uses ``sigma = radius * kernel_scale / 2``.
    """
    reach = radius * kernel_scale
    if falloff == "gaussian":
        sigma = reach / 2.0
        return np.exp(-(distances ** 2) / (2.0 * sigma * sigma))
    return np.clip(1.0 - distances / reach, 0.0, None)


def build_kernel(radius: int, ndim: int, kernel_scale: float, falloff: str) -> Kernel:
    """Build the offsets and spatial weights for one kernel radius."""
    offsets, distances = kernel_offsets(radius, ndim)
    return Kernel(radius, offsets, spatial_weights(distances, radius, kernel_scale, falloff))


@dataclass
class PassState:
    """Read-only inputs of one propagation-separation iteration.

    All per-pixel arrays are flattened in row-major order.
    """

    shape: Tuple[int, ...]
    image_a: np.ndarray
    image_b: np.ndarray
    valid: np.ndarray
    tau: np.ndarray
    sqrt_n: np.ndarray
    stopped: np.ndarray
    stop_tau: np.ndarray
    stop_sqrt_n: np.ndarray
    kernel: Kernel
    separation_lambda: float
    check: bool


def estimate_pixel(state: PassState, index: int, center: np.ndarray) -> Tuple[float, float]:
    """Score the adaptive neighborhood of a single pixel.

    Args:
        state: Iteration inputs
        index: Flat index of the center pixel
        center: Coordinates of the center pixel

    Returns:
        Tuple of (tau, sqrt_ess). Both are 0.0 for a neighborhood without
        any positive weight; a NaN tau (all samples tied) is reported as 0.0.
    """
    kernel = state.kernel
    coords = center + kernel.offsets
    inside = np.all((coords >= 0) & (coords < np.asarray(state.shape)), axis=1)
    neighbors = np.ravel_multi_index(tuple(coords[inside].T), state.shape)

    weights = kernel.weights[inside] * state.valid[neighbors]
    if not np.any(weights > 0.0):
        return 0.0, 0.0

    # separation: down-weight neighbors whose previous estimate differs from
    # the center's by more than the statistical tolerance
    diff = np.abs(state.tau[index] - state.tau[neighbors]) * state.sqrt_n[index] / state.separation_lambda
    weights = weights * np.clip(1.0 - diff ** 2, 0.0, None)

    keep = weights > 0.0
    weights = weights[keep]
    neighbors = neighbors[keep]

    ess = effective_sample_size(weights)
    if ess <= 0.0:
        return 0.0, 0.0

    tau = weighted_kendall_tau_b_correlation(
        state.image_a[neighbors], state.image_b[neighbors], weights
    )
    if math.isnan(tau):
        tau = 0.0

    return tau, math.sqrt(ess)


def adaptive_pass(state: PassState, start: int, stop: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Run one iteration for the flat pixel range ``[start, stop)``.

    Pixels are visited in row-major order. Once the stop check is active, a
    pixel whose new estimate departs from its frozen reference by more than
    ``separation_lambda`` (scaled by the reference sqrt ESS) is marked as
    stopped and keeps its previous estimate from then on.

    Returns:
        Tuple of (tau, sqrt_n, stopped) arrays for the range
    """
    n = stop - start
    new_tau = np.empty(n, dtype=np.float64)
    new_sqrt_n = np.empty(n, dtype=np.float64)
    new_stopped = state.stopped[start:stop].copy()

    centers = np.stack(np.unravel_index(np.arange(start, stop), state.shape), axis=1)

    for i in range(n):
        index = start + i

        if state.check and new_stopped[i]:
            new_tau[i] = state.tau[index]
            new_sqrt_n[i] = state.sqrt_n[index]
            continue

        tau, sqrt_n = estimate_pixel(state, index, centers[i])

        if state.check:
            departure = abs(state.stop_tau[index] - tau) * state.stop_sqrt_n[index]
            if departure > state.separation_lambda:
                new_stopped[i] = True
                tau = state.tau[index]
                sqrt_n = state.sqrt_n[index]

        new_tau[i] = tau
        new_sqrt_n[i] = sqrt_n

    return new_tau, new_sqrt_n, new_stopped
