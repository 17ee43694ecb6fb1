"""
Feature extraction: LBP parameters and per-pixel pattern / variance features.
"""
