"""Utility helpers shared across the pipeline."""
