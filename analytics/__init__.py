"""
Analytics module for OrgPulse review risk signals and volume trends.

This module turns a stream of organization reviews into a rolling
negative-review risk signal and a daily review-volume trend.
"""

__version__ = "1.0.0"
