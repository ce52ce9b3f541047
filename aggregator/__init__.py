"""
Inswinger content aggregation engine.
"""
