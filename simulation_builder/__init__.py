"""
Smart random question selection for school practice simulations.
"""

__version__ = "0.1.0"
