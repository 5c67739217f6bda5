"""Default configuration for the fluoranalysis package."""
