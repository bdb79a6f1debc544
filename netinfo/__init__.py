"""Directory service data values, attributes, indexes, assertions, filters and caches."""

__version__ = "2.8.0"