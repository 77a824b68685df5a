"""Marker-gated pipeline stages: download, decompile, patch, build and cleanup."""
