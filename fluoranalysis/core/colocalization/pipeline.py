"""Colocalization pipeline combining thresholding, SACA and significance masking."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
import pandas as pd

from fluoranalysis.config.settings import DEFAULT_PARALLEL, DEFAULT_SIGNIFICANCE, DEFAULT_THRESHOLD
from fluoranalysis.core.colocalization.roi_coloc import pearson_roi_coloc
from fluoranalysis.core.colocalization.saca import SacaConfig, saca_2d, saca_3d
from fluoranalysis.core.colocalization.significance import (
    bonferroni_critical_value,
    saca_significance_mask,
)
from fluoranalysis.core.errors import InvalidParameterError
from fluoranalysis.core.pipeline import Pipeline
from fluoranalysis.core.threshold.otsu import otsu_value
from fluoranalysis.utils.validation import check_image, check_shapes

THRESHOLD_METHODS = ['otsu', 'manual']


class ColocalizationPipeline(Pipeline):
    """Pixel-wise colocalization analysis of a two-channel image pair.

    The pipeline resolves per-channel intensity thresholds (explicit values,
    or Otsu's method), computes the SACA z-score field, marks significant
    pixels, and summarises the result. Given ROIs, it also tabulates
    per-ROI measurements.

    Configuration file sections (all optional)::

        {
            "saca": {"max_iterations": 15, "falloff": "linear", ...},
            "threshold": {"method": "otsu", "bins": 256},
            "significance": {"alpha": 0.05},
            "parallel": {"n_workers": 4}
        }

    Explicit constructor arguments take precedence over the file.
    """

    def __init__(
        self,
        image_a: np.ndarray,
        image_b: np.ndarray,
        threshold_a: Optional[float] = None,
        threshold_b: Optional[float] = None,
        alpha: Optional[float] = None,
        parallel: bool = False,
        n_workers: Optional[int] = None,
        saca_config: Optional[Dict[str, Any]] = None,
        output_dir: Optional[Union[str, Path]] = None,
        config_file: Optional[Union[str, Path]] = None,
        log_level: int = logging.INFO
    ):
        """Initialize the colocalization pipeline.

        Args:
            image_a: First channel (2D or 3D)
            image_b: Second channel, same shape as ``image_a``
            threshold_a: Intensity threshold for ``image_a``; None to compute it
            threshold_b: Intensity threshold for ``image_b``; None to compute it
            alpha: Significance level for the mask
            parallel: Run SACA on a process pool
            n_workers: Worker count for parallel mode
            saca_config: SACA parameter overrides
            output_dir: Optional directory for the JSON summary and log
            config_file: Optional path to JSON configuration file
            log_level: Logging level
        """
        super().__init__(
            output_dir=output_dir,
            config_file=config_file,
            log_level=log_level
        )

        self.image_a = np.asarray(image_a)
        self.image_b = np.asarray(image_b)
        self.threshold_a = threshold_a
        self.threshold_b = threshold_b
        self.parallel = parallel

        if n_workers is None:
            n_workers = self.config.get('parallel', {}).get('n_workers', DEFAULT_PARALLEL['n_workers'])
        self.n_workers = n_workers

        saca_params = dict(self.config.get('saca', {}))
        saca_params.update(saca_config or {})
        self.saca_config = SacaConfig.from_dict(saca_params)

        self.threshold_settings = dict(DEFAULT_THRESHOLD)
        self.threshold_settings.update(self.config.get('threshold', {}))

        if alpha is None:
            alpha = self.config.get('significance', {}).get('alpha', DEFAULT_SIGNIFICANCE['alpha'])
        self.alpha = alpha

        self.results: Dict[str, Any] = {}

    def validate_inputs(self) -> None:
        """Validate the image pair and pipeline settings.

        Raises:
            MismatchedArrayShapesError: If the images differ in shape
            InvalidParameterError: If the images are not 2D/3D or a setting is invalid
            TypeError: If an image element type is not supported
        """
        self.image_a = check_image(self.image_a, "image_a")
        self.image_b = check_image(self.image_b, "image_b")
        check_shapes(self.image_a, "image_a", self.image_b, "image_b")

        if self.image_a.ndim not in (2, 3):
            raise InvalidParameterError(
                "image_a", f"expected a 2D or 3D image but got {self.image_a.ndim} dimensions."
            )

        method = self.threshold_settings['method']
        if method not in THRESHOLD_METHODS:
            raise InvalidParameterError("method", f"must be one of {THRESHOLD_METHODS} but got {method!r}.")

        if method == 'manual' and (self.threshold_a is None or self.threshold_b is None):
            raise InvalidParameterError(
                "threshold", "manual thresholding requires both threshold_a and threshold_b."
            )

        if not 0.0 < self.alpha < 1.0:
            raise InvalidParameterError("alpha", f"must be between 0.0 and 1.0 (exclusive) but got {self.alpha}.")

    def resolve_thresholds(self) -> Tuple[float, float]:
        """Return the per-channel thresholds, computing missing ones with Otsu's method."""
        bins = self.threshold_settings.get('bins')

        threshold_a = self.threshold_a
        if threshold_a is None:
            threshold_a = otsu_value(self.image_a, bins)
            self.logger.info(f"Otsu threshold for image_a: {threshold_a}")

        threshold_b = self.threshold_b
        if threshold_b is None:
            threshold_b = otsu_value(self.image_b, bins)
            self.logger.info(f"Otsu threshold for image_b: {threshold_b}")

        return float(threshold_a), float(threshold_b)

    def run(self) -> Dict[str, Any]:
        """Run the colocalization analysis.

        Returns:
            Dictionary with the ``z_scores`` field, the significance ``mask``
            and a JSON serialisable ``summary``
        """
        self.validate_inputs()

        threshold_a, threshold_b = self.resolve_thresholds()

        saca = saca_2d if self.image_a.ndim == 2 else saca_3d
        z_scores = saca(
            self.image_a,
            self.image_b,
            threshold_a,
            threshold_b,
            parallel=self.parallel,
            config=self.saca_config,
            n_workers=self.n_workers
        )

        mask = saca_significance_mask(z_scores, self.alpha, parallel=self.parallel)
        summary = self.summarize(z_scores, mask, threshold_a, threshold_b)

        self.logger.info(
            f"{summary['n_significant']} of {summary['n_pixels']} pixels significant "
            f"(z_crit={summary['z_crit']:.3f})"
        )

        if self.output_dir:
            self.save_output(summary, "saca_summary.json")

        self.results = {
            'z_scores': z_scores,
            'mask': mask,
            'summary': summary
        }

        return self.results

    def summarize(
        self,
        z_scores: np.ndarray,
        mask: np.ndarray,
        threshold_a: float,
        threshold_b: float
    ) -> Dict[str, Any]:
        """Summarise a z-score field and its significance mask."""
        n_pixels = int(z_scores.size)
        finite = np.isfinite(z_scores)
        colocalized = mask & (z_scores > 0)
        anticolocalized = mask & (z_scores < 0)

        return {
            'shape': list(z_scores.shape),
            'n_pixels': n_pixels,
            'n_significant': int(np.count_nonzero(mask)),
            'fraction_colocalized': float(np.count_nonzero(colocalized)) / n_pixels if n_pixels else 0.0,
            'fraction_anticolocalized': float(np.count_nonzero(anticolocalized)) / n_pixels if n_pixels else 0.0,
            'mean_z': float(np.mean(z_scores[finite])) if np.any(finite) else 0.0,
            'max_z': float(np.max(z_scores[finite])) if np.any(finite) else 0.0,
            'min_z': float(np.min(z_scores[finite])) if np.any(finite) else 0.0,
            'threshold_a': threshold_a,
            'threshold_b': threshold_b,
            'alpha': float(self.alpha),
            'z_crit': float(bonferroni_critical_value(n_pixels, self.alpha)) if n_pixels else 0.0,
            'saca': self.saca_config.to_dict()
        }

    def measure_rois(self, rois: Dict[int, np.ndarray]) -> pd.DataFrame:
        """Tabulate per-ROI colocalization measurements.

        Runs the analysis first if it has not been run yet.

        Args:
            rois: Mapping of ROI label to a (pixels, dimensions) coordinate array

        Returns:
            DataFrame with columns label, n_pixels, pearson, mean_z and
            fraction_significant, one row per ROI sorted by label
        """
        if not self.results:
            self.run()

        z_scores = self.results['z_scores']
        mask = self.results['mask']
        pearson = pearson_roi_coloc(self.image_a, self.image_b, rois, parallel=self.parallel)

        rows = []
        for label, coords in rois.items():
            index = tuple(np.asarray(coords, dtype=np.int64).T)
            roi_z = z_scores[index]
            rows.append({
                'label': label,
                'n_pixels': len(coords),
                'pearson': pearson[label],
                'mean_z': float(np.nanmean(roi_z)) if np.any(np.isfinite(roi_z)) else np.nan,
                'fraction_significant': float(np.mean(mask[index])) if len(coords) else 0.0
            })

        columns = ['label', 'n_pixels', 'pearson', 'mean_z', 'fraction_significant']
        return pd.DataFrame(rows, columns=columns).sort_values('label').reset_index(drop=True)
