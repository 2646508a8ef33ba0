"""
Entry point for ``python -m munchkit``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
