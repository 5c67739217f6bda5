"""Pytest configuration and shared fixtures for the fluoranalysis test suite."""

import pytest
import numpy as np
import tempfile
import shutil
import json
from pathlib import Path
from typing import Generator, Tuple

# Add the parent directory to the path to import fluoranalysis
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from fluoranalysis.core.simulation import gaussian_metaballs


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single function or class")
    config.addinivalue_line("markers", "integration: end-to-end tests across modules")


@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test outputs."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    # Cleanup after test
    if temp_path.exists():
        shutil.rmtree(temp_path)


@pytest.fixture
def blob_image() -> np.ndarray:
    """Generate a small 16x16 image with a single Gaussian blob."""
    return gaussian_metaballs(
        centers=[[7.3, 8.6]],
        radii=[4.0],
        intensities=[100.0],
        falloffs=[1.0],
        background=10.0,
        shape=(16, 16)
    )


@pytest.fixture
def colocalized_pair(blob_image: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Two channels with identical intensity structure."""
    return blob_image, blob_image * 2.0 + 5.0


@pytest.fixture
def anticolocalized_pair(blob_image: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Two channels with inverted intensity structure."""
    return blob_image, blob_image.max() + 10.0 - blob_image


@pytest.fixture
def blob_volume() -> np.ndarray:
    """Generate a small 6x6x6 volume with a single Gaussian blob."""
    return gaussian_metaballs(
        centers=[[2.4, 3.1, 2.7]],
        radii=[2.0],
        intensities=[100.0],
        falloffs=[1.0],
        background=10.0,
        shape=(6, 6, 6)
    )


@pytest.fixture
def sample_label_image() -> np.ndarray:
    """Generate a 16x16 label image with two square ROIs."""
    labels = np.zeros((16, 16), dtype=np.uint16)
    labels[2:7, 2:7] = 1
    labels[9:14, 8:15] = 2
    return labels


@pytest.fixture
def fast_saca_config() -> dict:
    """SACA overrides that keep pure-Python runs short."""
    return {
        'max_iterations': 6,
        'check_iteration': 3
    }


@pytest.fixture
def sample_config(temp_dir: Path, fast_saca_config: dict) -> Path:
    """Write a sample pipeline configuration file."""
    config = {
        'saca': dict(fast_saca_config, falloff='gaussian'),
        'threshold': {'method': 'otsu', 'bins': 128},
        'significance': {'alpha': 0.01}
    }
    config_file = temp_dir / "config.json"
    with open(config_file, 'w') as f:
        json.dump(config, f)
    return config_file


@pytest.fixture(autouse=True)
def reset_random_seed():
    """Reset random seed before each test for reproducibility."""
    np.random.seed(42)


@pytest.fixture
def capture_logs(caplog):
    """Fixture to capture log messages during tests."""
    with caplog.at_level('DEBUG'):
        yield caplog
