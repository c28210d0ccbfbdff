"""Geometry and drawing helpers for the pose feedback pipeline."""
