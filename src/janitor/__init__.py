"""
Janitor module.
Periodically purges processed items and releases stale claims.
"""
