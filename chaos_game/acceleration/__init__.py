"""Tiled, optionally parallel, escape-time sweep."""
