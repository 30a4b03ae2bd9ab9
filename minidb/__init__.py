"""A small page-based relational storage engine: disk manager, buffer pool, records, table heaps and expressions."""

__version__ = "0.1.0"