"""assetgraph — typed asset relationships and dependency impact analysis."""

__version__ = "0.3.0"
