"""
Shared helpers for the ThreadRest gateway: logging setup and per-user paths.
"""
