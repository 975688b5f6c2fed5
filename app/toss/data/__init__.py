"""Bundled data files for toss."""
