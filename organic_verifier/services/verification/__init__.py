"""Verification service module."""
