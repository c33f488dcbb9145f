"""Bolna voice-agent integration for the booking platform"""

__version__ = "1.0.0"
