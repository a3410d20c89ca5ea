"""Scheduled catalog sync worker."""
