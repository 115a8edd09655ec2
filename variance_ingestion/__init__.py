"""
variance_ingestion -- Turning raw tabular content into variance records.

Parses pasted text, spreadsheet grids and record lists, resolves which
column plays which role, and builds normalized ``ParsedDataset`` objects.

Architecture:
    variance_ingestion/ is a top-level package. It depends on
    variance_kernel and variance_config; variance_engines does not import it.
"""
