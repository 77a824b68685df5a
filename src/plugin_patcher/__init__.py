"""Download, decompile, patch and rebuild a compiled plugin artifact."""

__version__ = "0.1.0"
