"""Organic certification verification service."""
