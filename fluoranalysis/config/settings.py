"""Configuration settings for the fluoranalysis package."""

import math

import numpy as np

# Default Spatially Adaptive Colocalization Analysis (SACA) parameters
DEFAULT_SACA = {
    "max_iterations": 15,
    "check_iteration": 8,
    "step_size": 1.15,
    "kernel_scale": math.sqrt(2.5),
    "falloff": "linear",
    "separation_lambda": None,
    "max_radius": None,
    "z_scale": 1.5
}

# Supported spatial weight falloff functions
SACA_FALLOFFS = ["linear", "gaussian"]

# Default significance masking parameters
DEFAULT_SIGNIFICANCE = {
    "alpha": 0.05
}

# Default threshold parameters
DEFAULT_THRESHOLD = {
    "method": "otsu",
    "bins": 256
}

# Default parallel execution parameters
DEFAULT_PARALLEL = {
    "n_workers": None
}

# Logging settings
LOGGING = {
    "level": "INFO",
    "file_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "console_format": "[%(levelname)s] %(message)s"
}

# Image element types accepted at the API boundary
SUPPORTED_DTYPES = [
    np.uint8,
    np.uint16,
    np.uint32,
    np.uint64,
    np.int64,
    np.float32,
    np.float64
]
