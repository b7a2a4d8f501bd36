"""Version and config-schema constants for product_crawler."""

__all__ = ["__version__", "CONFIG_SCHEMA_VERSION"]

#: Semantic version of the crawler.
__version__ = "0.2.0"

#: Bump when the config file format changes incompatibly.
CONFIG_SCHEMA_VERSION = 1
