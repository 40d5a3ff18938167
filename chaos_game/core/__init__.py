"""Core math, descriptions, canvas and game drivers."""
