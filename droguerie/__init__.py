"""
Droguerie Jamal Data Tooling

Operational tooling for the Droguerie Jamal storefront: SQLite to MySQL
migration, admin credential seeding, product image enrichment and an HTTP
flow test of the running storefront.
"""

__version__ = "1.0.0"
