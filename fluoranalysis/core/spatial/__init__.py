"""Spatial helpers."""

from fluoranalysis.core.spatial.roi import rois_from_labels

__all__ = ['rois_from_labels']
