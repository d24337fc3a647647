"""Curve kernels."""
