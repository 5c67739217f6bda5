"""Integration tests for Spatially Adaptive Colocalization Analysis."""

import pytest
import numpy as np

from fluoranalysis.core.colocalization import (
    SacaConfig,
    saca_2d,
    saca_3d,
    saca_significance_mask,
)
from fluoranalysis.core.errors import InvalidParameterError, MismatchedArrayShapesError
from fluoranalysis.core.simulation import gaussian_metaballs, logistic_metaballs


class TestSaca2D:
    """Test SACA on 2D images."""

    @pytest.mark.integration
    def test_colocalized_images(self, colocalized_pair):
        """Test that channels with identical structure give strong positive z-scores."""
        image_a, image_b = colocalized_pair

        z_scores = saca_2d(image_a, image_b, 0.0, 0.0)
        mask = saca_significance_mask(z_scores)

        assert z_scores.shape == image_a.shape
        assert z_scores.dtype == np.float64
        assert np.all(z_scores > 0.0)
        assert mask.mean() > 0.9

    @pytest.mark.integration
    def test_anticolocalized_images(self, anticolocalized_pair):
        """Test that inverted channels give strong negative z-scores."""
        image_a, image_b = anticolocalized_pair

        z_scores = saca_2d(image_a, image_b, 0.0, 0.0)
        mask = saca_significance_mask(z_scores)

        assert np.all(z_scores < 0.0)
        assert mask.mean() > 0.9

    @pytest.mark.integration
    def test_thresholds_exclude_everything(self, colocalized_pair, fast_saca_config):
        """Test that pixels below both thresholds carry no evidence."""
        image_a, image_b = colocalized_pair

        z_scores = saca_2d(
            image_a, image_b, image_a.max() + 1.0, image_b.max() + 1.0,
            config=SacaConfig.from_dict(fast_saca_config)
        )

        np.testing.assert_array_equal(z_scores, 0.0)

    @pytest.mark.integration
    def test_parallel_matches_sequential(self, fast_saca_config):
        """Test that parallel and sequential runs give identical results."""
        image_a = np.random.randint(0, 1000, size=(12, 14)).astype(np.uint16)
        image_b = (image_a // 2 + np.random.randint(0, 300, size=(12, 14))).astype(np.uint16)
        config = SacaConfig.from_dict(fast_saca_config)

        sequential = saca_2d(image_a, image_b, 100, 50, parallel=False, config=config)
        parallel = saca_2d(image_a, image_b, 100, 50, parallel=True, config=config, n_workers=2)

        np.testing.assert_array_equal(parallel, sequential)

    @pytest.mark.integration
    def test_gaussian_falloff(self, colocalized_pair, fast_saca_config):
        """Test the gaussian spatial falloff."""
        image_a, image_b = colocalized_pair
        config = SacaConfig.from_dict(dict(fast_saca_config, falloff='gaussian'))

        z_scores = saca_2d(image_a, image_b, 0.0, 0.0, config=config)

        assert np.all(z_scores > 0.0)

    @pytest.mark.integration
    def test_integer_image_with_fractional_threshold(self, fast_saca_config):
        """Test that integer images accept fractional thresholds."""
        image = np.arange(64, dtype=np.uint8).reshape(8, 8)
        config = SacaConfig.from_dict(fast_saca_config)

        np.testing.assert_array_equal(
            saca_2d(image, image, 10.7, 10.7, config=config),
            saca_2d(image, image, 10, 10, config=config)
        )

    @pytest.mark.integration
    def test_offset_blobs_parallel_matches_sequential(self, fast_saca_config):
        """Test execution mode independence on offset blob images."""
        shape = (32, 32)
        image_a = gaussian_metaballs([[14, 14]], [5.0], [200.0], [1.0], 20.0, shape)
        image_b = gaussian_metaballs([[17, 18]], [5.0], [200.0], [1.0], 20.0, shape)
        config = SacaConfig.from_dict(fast_saca_config)

        sequential = saca_2d(image_a, image_b, 30.0, 30.0, parallel=False, config=config)
        parallel = saca_2d(image_a, image_b, 30.0, 30.0, parallel=True, config=config, n_workers=3)

        np.testing.assert_allclose(parallel, sequential, atol=1e-9, equal_nan=True)

    @pytest.mark.integration
    def test_disjoint_blobs(self, fast_saca_config):
        """Test that spatially disjoint blobs carry no colocalization signal."""
        shape = (16, 24)
        image_a = logistic_metaballs([[8, 5]], [3.0], [100.0], [0.1], 1.0, shape)
        image_b = logistic_metaballs([[8, 18]], [3.0], [100.0], [0.1], 1.0, shape)

        z_scores = saca_2d(image_a, image_b, 50.0, 50.0, config=SacaConfig.from_dict(fast_saca_config))

        np.testing.assert_array_equal(z_scores, 0.0)
        assert not np.any(saca_significance_mask(z_scores))

    @pytest.mark.integration
    def test_out_of_range_integer_thresholds(self, fast_saca_config):
        """Test that thresholds beyond the integer range gate nothing or everything."""
        image = np.arange(64, dtype=np.uint8).reshape(8, 8)
        config = SacaConfig.from_dict(fast_saca_config)

        reference = saca_2d(image, image, 0, 0, config=config)
        below = saca_2d(image, image, -1, -1, config=config)
        above = saca_2d(image, image, 300, 300, config=config)

        assert np.all(reference > 0.0)
        np.testing.assert_array_equal(below, reference)
        np.testing.assert_array_equal(above, 0.0)

    @pytest.mark.integration
    def test_shape_mismatch(self):
        """Test that the two images must have the same shape."""
        with pytest.raises(MismatchedArrayShapesError):
            saca_2d(np.zeros((10, 10)), np.zeros((10, 12)), 0.0, 0.0)

    @pytest.mark.integration
    def test_wrong_dimensions(self):
        """Test that 2D analysis rejects volumes."""
        with pytest.raises(InvalidParameterError):
            saca_2d(np.zeros((3, 3, 3)), np.zeros((3, 3, 3)), 0.0, 0.0)

    @pytest.mark.integration
    def test_unsupported_dtype(self):
        """Test that unsupported element types are rejected."""
        with pytest.raises(TypeError):
            saca_2d(np.zeros((4, 4), dtype=np.int8), np.zeros((4, 4), dtype=np.int8), 0, 0)

    @pytest.mark.integration
    def test_empty_image(self):
        """Test that an empty image gives an empty z-score field."""
        assert saca_2d(np.zeros((0, 5)), np.zeros((0, 5)), 0.0, 0.0).shape == (0, 5)

    @pytest.mark.integration
    def test_logs_progress(self, colocalized_pair, fast_saca_config, capture_logs):
        """Test that runs are logged."""
        image_a, image_b = colocalized_pair

        saca_2d(image_a, image_b, 0.0, 0.0, config=SacaConfig.from_dict(fast_saca_config))

        assert "Running SACA" in capture_logs.text
        assert "SACA iteration 0" in capture_logs.text


class TestSaca3D:
    """Test SACA on 3D volumes."""

    @pytest.mark.integration
    def test_colocalized_volume(self, blob_volume, fast_saca_config):
        """Test that matching volumes give positive z-scores."""
        z_scores = saca_3d(
            blob_volume, blob_volume * 0.5, 0.0, 0.0,
            config=SacaConfig.from_dict(fast_saca_config)
        )

        assert z_scores.shape == blob_volume.shape
        assert np.all(z_scores > 0.0)

    @pytest.mark.integration
    def test_parallel_matches_sequential(self, blob_volume, fast_saca_config):
        """Test process-pool execution on a volume."""
        image_b = blob_volume + np.random.rand(*blob_volume.shape) * 20.0
        config = SacaConfig.from_dict(dict(fast_saca_config, max_iterations=4))

        np.testing.assert_array_equal(
            saca_3d(blob_volume, image_b, 0.0, 0.0, parallel=True, config=config, n_workers=2),
            saca_3d(blob_volume, image_b, 0.0, 0.0, config=config)
        )

    @pytest.mark.integration
    def test_wrong_dimensions(self):
        """Test that 3D analysis rejects 2D images."""
        with pytest.raises(InvalidParameterError):
            saca_3d(np.zeros((4, 4)), np.zeros((4, 4)), 0.0, 0.0)
