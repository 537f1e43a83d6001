"""Library no-debt certificates as Word documents, with a local SQLite register, search and CSV export."""

__version__ = "2.0.0"