"""
                Restaurant Menu

Server-rendered restaurant menu: visitors browse meals, customers
comment on dishes and administrators manage the catalog.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
