"""In-memory data stores for maintaining entity relationships."""

from clinic_finance.store.clinic import ClinicDataStore

__all__ = ["ClinicDataStore"]
