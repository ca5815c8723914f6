"""Transition-point analysis for pairs of DJ tracks"""

__version__ = "1.0.0"
