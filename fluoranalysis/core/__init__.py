"""Core analysis modules: statistics, thresholding, simulation and colocalization."""
