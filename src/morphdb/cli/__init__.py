"""MorphDB command-line interface."""
