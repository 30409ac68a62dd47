"""Media Analyzer - probe, catalog, and query technical metadata of media files."""

__version__ = "0.4.0"
