"""
Storage backends for mudstore.

The connector opens a handle for a backend kind: a DocumentStore over a
directory of JSON files or a RelationalStore over a SQLAlchemy engine. The
schema module creates the relational tables described by the codec registry.
"""
