"""Unit tests for the top-level package exports."""

import page_cache
from page_cache.config import Settings, validate_config
from page_cache.logging_config import configure_logging
from page_cache.middleware import PageCache


class TestPackageExports:
    """Test that startup entry points are reachable from the package root."""

    def test_configuration_entry_points(self):
        """Test settings, validation and logging exports."""
        assert page_cache.Settings is Settings
        assert page_cache.validate_config is validate_config
        assert page_cache.configure_logging is configure_logging
        assert page_cache.PageCache is PageCache

    def test_all_names_resolve(self):
        """Test that every name in __all__ exists."""
        for name in page_cache.__all__:
            assert hasattr(page_cache, name), name
