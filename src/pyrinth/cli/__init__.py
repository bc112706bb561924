"""Command line interface for pyrinth."""
