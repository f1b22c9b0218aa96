"""
Extract Layer - Pure I/O to the Roblox APIs

This layer handles all external data fetching with no business logic.
- No imports from transform or load layers
- One client per endpoint, each returning a per-universe mapping
- Retries and rate limiting live in coreutils.request
"""
