"""Bundled data files for tssc-cli."""
