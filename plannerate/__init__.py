"""Pegboard layout and shelf placement engine"""

__version__ = "0.1.0"
