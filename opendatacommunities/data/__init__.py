"""
Bulk data utilities.

Bulk archives are downloaded through the client; this package handles the
file listing, archive extraction and schema parsing.
"""
