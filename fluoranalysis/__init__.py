"""FluorAnalysis package for fluorescence microscopy image analysis.

This package provides tools for quantifying colocalization between two
fluorescence channels, including Spatially Adaptive Colocalization Analysis
(SACA), significance masking, per-ROI Pearson correlation, automatic
thresholding, and synthetic blob image simulation.
"""

__version__ = "0.3.0"

# Import key components for easy access
from fluoranalysis.core.pipeline import Pipeline
from fluoranalysis.core.colocalization import (
    ColocalizationPipeline,
    SacaConfig,
    pearson_roi_coloc,
    saca_2d,
    saca_3d,
    saca_significance_mask,
)
from fluoranalysis.core.errors import (
    FluorAnalysisError,
    InvalidParameterError,
    MismatchedArrayLengthsError,
    MismatchedArrayShapesError,
)
from fluoranalysis.core.simulation import gaussian_metaballs, logistic_metaballs
from fluoranalysis.core.spatial import rois_from_labels
from fluoranalysis.core.statistics import (
    effective_sample_size,
    inverse_normal_cdf,
    min_max,
    pearson_correlation,
    weighted_kendall_tau_b_correlation,
    weighted_merge_sort_mut,
)
from fluoranalysis.core.threshold import manual_mask, otsu_mask, otsu_value
from fluoranalysis.utils.logging import setup_logger
