"""Record store and JSON artifact utilities."""

from src.io.catalog import ScholarshipCatalog, ScholarshipStore, StudentDirectory, load_catalog, load_students

__all__ = ["ScholarshipCatalog", "ScholarshipStore", "StudentDirectory", "load_catalog", "load_students"]
