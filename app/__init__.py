"""
                Restaurant Management API

REST backend for restaurant management: authentication with
account lockout, users and roles, dining tables, products and
categories, and table orders.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
