"""
StaffHub bulk data import engine.
"""

__version__ = "0.1.0"
