"""
Shared SQLAlchemy metadata for mudstore tables.

Every registered entity codec builds its table on this metadata so the
schema manager and the relational store agree on one set of Table objects.
"""

from sqlalchemy import MetaData

# Shared metadata for all entity tables
metadata = MetaData()
