"""
HTTP transport for the ThreadRest gateway (Flask)
"""

from .app import create_app

__all__ = ['create_app']
