"""Read-through cache for LTA DataMall bus arrival timings."""

__version__ = "0.1.0"
