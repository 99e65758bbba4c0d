"""Facebook video CDN link extractor."""

__version__ = "2.0.0"
