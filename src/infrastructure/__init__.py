"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: the Sanity HTTP API, SQLite, JWT.
Depends on domain/ only (implements ports). Never imported by application/.
"""
