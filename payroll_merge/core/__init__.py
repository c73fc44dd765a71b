"""Normalization, schema checks and sample data."""
