"""
clm_ingestion -- contract import from CSV/XLSX files and CSV export.

Reads spreadsheet exports with the store's column names, coerces each row
through the kernel mapping boundary, and bulk-inserts the valid rows.
Exports write the same columns back out so a file can round-trip.

Architecture:
    clm_ingestion/ is a top-level package. It imports from clm_kernel;
    nothing in clm_kernel/ or clm_engines/ imports from ingestion.
"""
