"""Campaign ROI normalization and competitive ranking."""

__version__ = "0.1.0"
