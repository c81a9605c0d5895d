"""
Run the mirror daemon directly.

Usage:
    python -m gitmirror serve
"""

from .main import main

main()
