"""
Shared building blocks: data records, Web Mercator / tile math, config and logging.
"""
