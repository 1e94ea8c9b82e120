"""
Coach Running: performance calibration and adherence adaptation for
personalized running plans.
"""

__version__ = "0.1.0"
