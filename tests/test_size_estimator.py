"""Unit tests for image_migrator/size_estimator.py"""

from unittest.mock import MagicMock

import pytest

from image_migrator.size_estimator import SizeEstimator, sum_layer_sizes


class TestSumLayerSizes:
    """Tests for sum_layer_sizes"""

    def test_sums_layers_data(self):
        """Test that LayersData sizes are summed"""
        info = {"LayersData": [{"Size": 100, "Digest": "sha256:a"}, {"Size": 250, "Digest": "sha256:b"}]}
        assert sum_layer_sizes(info) == 350

    def test_digest_only_layers_are_zero(self):
        """Test that a plain digest list carries no size"""
        assert sum_layer_sizes({"Layers": ["sha256:a", "sha256:b"]}) == 0

    def test_layers_with_size_are_counted(self):
        """Test the fallback to Layers entries that carry a Size"""
        assert sum_layer_sizes({"Layers": [{"Size": 7}, {"Size": 3}]}) == 10

    @pytest.mark.parametrize("info", [None, {}, {"LayersData": "broken"}, {"LayersData": [{"Size": "big"}]}, []])
    def test_malformed_input_is_zero(self, info):
        """Test that anything unexpected yields 0"""
        assert sum_layer_sizes(info) == 0


class TestSizeEstimator:
    """Tests for SizeEstimator.estimate"""

    def test_estimates_from_inspect(self):
        """Test that the tag reference is inspected and its layers summed"""
        client = MagicMock()
        client.inspect_image.return_value = {"LayersData": [{"Size": 1024}, {"Size": 1024}]}

        size = SizeEstimator(client).estimate("src.example.com/ns1/app", "v1")

        assert size == 2048
        client.inspect_image.assert_called_once_with("src.example.com/ns1/app:v1")

    def test_unreachable_registry_is_zero(self):
        """Test that a failed inspect yields 0"""
        client = MagicMock()
        client.inspect_image.return_value = None

        assert SizeEstimator(client).estimate("src.example.com/ns1/app", "v1") == 0

    def test_never_raises(self):
        """Test that unexpected errors are swallowed"""
        client = MagicMock()
        client.inspect_image.side_effect = RuntimeError("boom")

        assert SizeEstimator(client).estimate("src.example.com/ns1/app", "v1") == 0
