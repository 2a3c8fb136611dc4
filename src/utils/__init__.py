"""Utilities package for the cocktail order engine."""
