"""Vocabulary enrichment pipeline.

Looks words up in several lexical sources, merges the best evidence,
normalizes it with a generative backend and reconciles the result against
a vocabulary store.
"""

__version__ = "0.1.0"
