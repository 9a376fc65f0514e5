"""
Persistence adapters.

sql_repository holds the relational stores (accounts, catalog, liveness
records); object_storage holds image blobs. Services depend on these classes
through their constructors so tests can substitute fakes.
"""
