"""Radar FFT conversion, CA-CFAR filtering and motion compensation of point clouds."""

__version__ = "0.1.0"