"""
Domain entities shipped with persistkit.
"""

from .customer import Customer

__all__ = ["Customer"]
