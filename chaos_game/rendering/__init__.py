"""Buffer coloring and image export."""
