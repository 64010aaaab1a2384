"""
FlowPilot API Package

Usage:
    from flowpilot.models import Project
    from flowpilot.core.config import settings
"""

__version__ = "1.0.0"  # Application version
