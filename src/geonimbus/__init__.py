"""GeoNimbus: cache-aside geocoding and spatial address queries."""

__version__ = "0.1.0"
