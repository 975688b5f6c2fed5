"""Core infrastructure for toss.

Paths, configuration, identifier generation, and the metadata ledger.
"""
