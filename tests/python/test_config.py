"""
Tests for configuration read from the environment.
"""

import pytest
from pica.config import (
    DEFAULT_LOCATOR_CACHE_SIZE,
    ENV_LOCATOR_CACHE_SIZE,
    _read_cache_size,
)


class TestLocatorCacheSize:

    def test_default(self):
        assert _read_cache_size({}) == DEFAULT_LOCATOR_CACHE_SIZE
        assert _read_cache_size({ENV_LOCATOR_CACHE_SIZE: "  "}) == DEFAULT_LOCATOR_CACHE_SIZE

    def test_explicit_size(self):
        assert _read_cache_size({ENV_LOCATOR_CACHE_SIZE: "4096"}) == 4096
        assert _read_cache_size({ENV_LOCATOR_CACHE_SIZE: " 16 "}) == 16

    def test_zero_disables(self):
        assert _read_cache_size({ENV_LOCATOR_CACHE_SIZE: "0"}) == 0

    @pytest.mark.parametrize("raw", ["lots", "1.5", "-1"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError, match=ENV_LOCATOR_CACHE_SIZE):
            _read_cache_size({ENV_LOCATOR_CACHE_SIZE: raw})
