"""
munchkit - business hours and recently viewed items for the Munch app.
"""

__version__ = "0.1.0"
