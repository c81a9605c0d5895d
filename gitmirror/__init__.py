"""
git-mirror — Continuously mirror git repositories and report their health.
"""

__version__ = "0.1.0"
