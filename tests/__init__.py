"""
Test Suite Module

This module contains all tests for the OrgPulse analytics engine,
including unit tests, integration tests, and test utilities.
"""

__version__ = "0.1.0"
__author__ = "OrgPulse Team"
