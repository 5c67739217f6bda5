"""Synthetic image simulation."""

from fluoranalysis.core.simulation.blob import gaussian_metaballs, logistic_metaballs

__all__ = ['gaussian_metaballs', 'logistic_metaballs']
