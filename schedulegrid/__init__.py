"""
schedulegrid - weekly coach schedule grid engine.
"""

__version__ = "0.1.0"
