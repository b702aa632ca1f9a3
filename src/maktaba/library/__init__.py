"""Scholar media library listings."""

from .scholars import ScholarInfo, ScholarLibrary, SectionListing

__all__ = ["ScholarInfo", "ScholarLibrary", "SectionListing"]
