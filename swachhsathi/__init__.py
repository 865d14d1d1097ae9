"""
SwachhSathi - Waste report triage and dispatch.
"""

__version__ = "1.0.0"
