"""Explorer data layer: validator storage in SQLite, table row models and an HTTP actions worker."""

__version__ = "3.0.0"