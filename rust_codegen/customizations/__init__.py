"""Built-in customizations."""

from .region import RegionConfig, RegionConfigPlugin, region

__all__ = ["RegionConfig", "RegionConfigPlugin", "region"]
