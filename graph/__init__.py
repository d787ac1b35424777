"""Data model for export/consumer dependency graphs."""
