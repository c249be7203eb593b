"""Configuration — defaults layered with YAML files and environment."""

from imagecache.config.hierarchy import load_config_hierarchy
from imagecache.config.schema import ImageCacheConfig

__all__ = ["ImageCacheConfig", "load_config_hierarchy"]
