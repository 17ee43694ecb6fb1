"""
Histogram models built from LBP features.
"""
