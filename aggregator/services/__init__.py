"""
Aggregation services: fetching, parsing, normalizing, merging.
"""
