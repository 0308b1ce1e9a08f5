"""A graph-rewriting runtime for lambda-calculus terms: heap, rules, reducer and runtime front."""

__version__ = "0.1.0"