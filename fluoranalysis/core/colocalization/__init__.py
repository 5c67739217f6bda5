"""Pixel-wise and ROI colocalization analysis."""

from fluoranalysis.core.colocalization.pipeline import ColocalizationPipeline
from fluoranalysis.core.colocalization.roi_coloc import pearson_roi_coloc
from fluoranalysis.core.colocalization.saca import SacaConfig, saca_2d, saca_3d
from fluoranalysis.core.colocalization.significance import (
    bonferroni_critical_value,
    saca_significance_mask,
)

__all__ = [
    'ColocalizationPipeline',
    'SacaConfig',
    'bonferroni_critical_value',
    'pearson_roi_coloc',
    'saca_2d',
    'saca_3d',
    'saca_significance_mask',
]
