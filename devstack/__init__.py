"""
Manage the PostgreSQL and Redis servers used during local development.
"""

__version__ = "0.1.0"
