"""Image thresholding."""

from fluoranalysis.core.threshold.manual import manual_mask
from fluoranalysis.core.threshold.otsu import otsu_mask, otsu_value

__all__ = ['manual_mask', 'otsu_mask', 'otsu_value']
