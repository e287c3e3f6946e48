"""
mudstore - storage backends and data migration for the MUD game server.

Moves the server's durable state between a directory of JSON documents,
an embedded SQLite database and a networked PostgreSQL database.
"""

__version__ = "0.1.0"
