"""
Load Layer - Data Persistence

This layer writes the games snapshot artifact.
- Local JSON file storage
- No business logic, just I/O operations
"""
