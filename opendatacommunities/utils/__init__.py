"""
Utility modules for Open Data Communities API access.

- network: request building and the paginated search loop
- data: normalization of API responses into DataFrames
"""
