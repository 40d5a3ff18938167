"""Description files and render configuration."""
