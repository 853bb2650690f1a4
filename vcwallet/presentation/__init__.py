"""
Presentation module initialization
"""

from .engine import PresentationEngine

__all__ = ["PresentationEngine"]
