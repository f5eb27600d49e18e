"""Job Catalog - localized, cached read access to jobs and their reference data."""

__version__ = "1.0.0"
