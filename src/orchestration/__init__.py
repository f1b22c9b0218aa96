"""
Orchestration Layer - Workflow Coordination

This layer coordinates the batch workflow.
- Batching, per-batch fan-out/join, throttling
- Failure isolation per batch
- Composes extract, transform, and load operations
"""
