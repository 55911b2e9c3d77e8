"""
Core utilities shared across the Gigbook backend.

This package hosts configuration helpers (env vars, timeouts) and the logging
setup. Repositories and routers depend on these primitives instead of reading
os.environ directly.
"""
