"""pyrinth - typed async bindings for the Modrinth API."""

__version__ = "2.0.0"
