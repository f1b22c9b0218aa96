"""
Transformation Layer - Pure, Deterministic Functions

This layer joins the per-endpoint mappings into games entries.
- Pure functions (input → output)
- No I/O operations
- Unit testable
"""
