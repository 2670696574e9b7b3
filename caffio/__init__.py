"""
                Caffio

Multi-tenant cafe ordering platform: REST API for cafes, menus, orders,
reviews, customers and payments, plus a small async client used by the
customer app and the admin dashboard.
"""

__version__ = "1.0.0"
