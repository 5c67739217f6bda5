"""Spatially Adaptive Colocalization Analysis (SACA).

SACA computes a per-pixel z-score of colocalization strength between two
co-registered images. Around every pixel a weighted circular (2D) or
spherical (3D) neighborhood is grown over a fixed radius schedule
(propagation); neighbors whose previous estimate is statistically
distinguishable from the center's are excluded (separation), and each pixel
stops growing once its estimate departs from the reference frozen at the
check iteration. The neighborhood is scored with the weighted Kendall's
Tau-b and converted to a z-score with its effective sample size.

Reference:
    https://doi.org/10.1109/TIP.2019.2909194
"""

import logging
import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional

import numpy as np

from fluoranalysis.config.settings import DEFAULT_SACA, SACA_FALLOFFS
from fluoranalysis.core.colocalization.neighborhood import PassState, adaptive_pass, build_kernel
from fluoranalysis.core.errors import InvalidParameterError
from fluoranalysis.utils.parallel import map_partitions, pixel_executor, resolve_workers
from fluoranalysis.utils.validation import cast_threshold, check_image, check_shapes

logger = logging.getLogger(__name__)


@dataclass
class SacaConfig:
    """Tunable parameters of the adaptive kernel.

    Attributes:
        max_iterations: Number of propagation iterations
        check_iteration: Iteration after which the stop reference is frozen
            and the stop test becomes active
        step_size: Growth factor of the kernel size per iteration
        kernel_scale: Reach of the spatial falloff relative to the radius
        falloff: Spatial weight function, "linear" or "gaussian"
        separation_lambda: Separation tolerance; None uses 2 * sqrt(ln N)
        max_radius: Optional cap on the kernel radius
        z_scale: Factor converting tau * sqrt(ESS) into a z-score
    """

    max_iterations: int = DEFAULT_SACA["max_iterations"]
    check_iteration: int = DEFAULT_SACA["check_iteration"]
    step_size: float = DEFAULT_SACA["step_size"]
    kernel_scale: float = DEFAULT_SACA["kernel_scale"]
    falloff: str = DEFAULT_SACA["falloff"]
    separation_lambda: Optional[float] = DEFAULT_SACA["separation_lambda"]
    max_radius: Optional[int] = DEFAULT_SACA["max_radius"]
    z_scale: float = DEFAULT_SACA["z_scale"]

    @classmethod
    def from_dict(cls, overrides: Optional[Dict[str, Any]] = None) -> "SacaConfig":
        """Build a config from the defaults updated with ``overrides``.

        Raises:
            InvalidParameterError: On unknown keys or invalid values
        """
        overrides = dict(overrides or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise InvalidParameterError("config", f"unknown SACA parameters {unknown}.")

        params = dict(DEFAULT_SACA)
        params.update(overrides)
        config = cls(**params)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        """Check parameter ranges.

        Raises:
            InvalidParameterError: If a parameter is out of range
        """
        if self.max_iterations < 1:
            raise InvalidParameterError("max_iterations", "must be at least 1.")
        if self.check_iteration < 0:
            raise InvalidParameterError("check_iteration", "can not be negative.")
        if self.step_size < 1.0:
            raise InvalidParameterError("step_size", "must be at least 1.0.")
        if self.kernel_scale <= 0.0:
            raise InvalidParameterError("kernel_scale", "must be greater than 0.")
        if self.falloff not in SACA_FALLOFFS:
            raise InvalidParameterError("falloff", f"must be one of {SACA_FALLOFFS} but got {self.falloff!r}.")
        if self.separation_lambda is not None and self.separation_lambda <= 0.0:
            raise InvalidParameterError("separation_lambda", "must be greater than 0.")
        if self.max_radius is not None and self.max_radius < 1:
            raise InvalidParameterError("max_radius", "must be at least 1.")
        if self.z_scale <= 0.0:
            raise InvalidParameterError("z_scale", "must be greater than 0.")

    def radius_schedule(self) -> List[int]:
        """Kernel radius used at each iteration."""
        radii = []
        size = 1.0
        for _ in range(self.max_iterations):
            radius = max(1, int(math.floor(size)))
            if self.max_radius is not None:
                radius = min(radius, self.max_radius)
            radii.append(radius)
            size *= self.step_size
        return radii

    def resolve_lambda(self, n_pixels: int) -> float:
        """Separation tolerance for an image with ``n_pixels`` pixels."""
        if self.separation_lambda is not None:
            return float(self.separation_lambda)
        # log(1) == 0 would disable separation for a single pixel image
        return 2.0 * math.sqrt(math.log(max(n_pixels, 2)))


def saca_2d(
    data_a: np.ndarray,
    data_b: np.ndarray,
    threshold_a: float,
    threshold_b: float,
    parallel: bool = False,
    config: Optional[SacaConfig] = None,
    n_workers: Optional[int] = None
) -> np.ndarray:
    """Compute 2-dimensional colocalization strength with SACA.

    Args:
        data_a: 2D image, same shape as ``data_b``
        data_b: 2D image, same shape as ``data_a``
        threshold_a: Intensity threshold for ``data_a``; neighborhood pixels
            below it get a weight of 0.0
        threshold_b: Intensity threshold for ``data_b``
        parallel: Spread pixels over a process pool instead of running in
            the calling process. Both modes give identical results.
        config: Adaptive kernel parameters. Defaults to ``SacaConfig()``.
        n_workers: Worker count for parallel mode (default: CPU count - 1)

    Returns:
        float64 z-score array with the shape of the inputs; the sign gives
        colocalization (+) or anti-colocalization (-)

    Raises:
        MismatchedArrayShapesError: If the image shapes differ
        InvalidParameterError: If either image is not 2-dimensional
        TypeError: If an image element type is not supported
    """
    return _saca(data_a, data_b, threshold_a, threshold_b, parallel, config, n_workers, ndim=2)


def saca_3d(
    data_a: np.ndarray,
    data_b: np.ndarray,
    threshold_a: float,
    threshold_b: float,
    parallel: bool = False,
    config: Optional[SacaConfig] = None,
    n_workers: Optional[int] = None
) -> np.ndarray:
    """Compute 3-dimensional colocalization strength with SACA.

    Same as ``saca_2d`` with spherical neighborhoods over 3D volumes.

    Raises:
        MismatchedArrayShapesError: If the image shapes differ
        InvalidParameterError: If either image is not 3-dimensional
        TypeError: If an image element type is not supported
    """
    return _saca(data_a, data_b, threshold_a, threshold_b, parallel, config, n_workers, ndim=3)


def _saca(
    data_a: np.ndarray,
    data_b: np.ndarray,
    threshold_a: float,
    threshold_b: float,
    parallel: bool,
    config: Optional[SacaConfig],
    n_workers: Optional[int],
    ndim: int
) -> np.ndarray:
    data_a = check_image(data_a, "data_a", ndim)
    data_b = check_image(data_b, "data_b", ndim)
    check_shapes(data_a, "data_a", data_b, "data_b")

    if config is None:
        config = SacaConfig()
    config.validate()

    shape = data_a.shape
    n_pixels = data_a.size
    if n_pixels == 0:
        return np.zeros(shape, dtype=np.float64)

    thr_a = cast_threshold(threshold_a, data_a.dtype)
    thr_b = cast_threshold(threshold_b, data_b.dtype)
    image_a = data_a.astype(np.float64).ravel()
    image_b = data_b.astype(np.float64).ravel()
    valid = (image_a >= thr_a) & (image_b >= thr_b)

    separation_lambda = config.resolve_lambda(n_pixels)
    workers = resolve_workers(n_workers)

    mode = f"parallel, {workers} workers" if parallel else "sequential"
    logger.info(
        f"Running SACA on {ndim}D images of shape {shape} "
        f"(thresholds {thr_a}, {thr_b}, {mode})"
    )

    tau = np.zeros(n_pixels, dtype=np.float64)
    sqrt_n = np.ones(n_pixels, dtype=np.float64)
    stopped = np.zeros(n_pixels, dtype=bool)
    stop_tau = np.zeros(n_pixels, dtype=np.float64)
    stop_sqrt_n = np.zeros(n_pixels, dtype=np.float64)
    check = False

    with pixel_executor(parallel, workers) as executor:
        for iteration, radius in enumerate(config.radius_schedule()):
            state = PassState(
                shape=shape,
                image_a=image_a,
                image_b=image_b,
                valid=valid,
                tau=tau,
                sqrt_n=sqrt_n,
                stopped=stopped,
                stop_tau=stop_tau,
                stop_sqrt_n=stop_sqrt_n,
                kernel=build_kernel(radius, ndim, config.kernel_scale, config.falloff),
                separation_lambda=separation_lambda,
                check=check
            )
            parts = map_partitions(adaptive_pass, n_pixels, executor, workers, state)

            tau = np.concatenate([p[0] for p in parts])
            sqrt_n = np.concatenate([p[1] for p in parts])
            stopped = np.concatenate([p[2] for p in parts])

            logger.debug(
                f"SACA iteration {iteration}: radius {radius}, "
                f"{int(np.count_nonzero(stopped))} of {n_pixels} pixels stopped"
            )

            if iteration == config.check_iteration:
                check = True
                stop_tau = tau.copy()
                stop_sqrt_n = sqrt_n.copy()

    z_scores = (config.z_scale * tau * sqrt_n).reshape(shape)
    logger.info("SACA completed")

    return z_scores
