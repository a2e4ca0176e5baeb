"""Numeric building blocks: power extraction, ages, baselines, scores."""
