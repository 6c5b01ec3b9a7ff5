"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, byte storage, job queue).
Provides adapters and clients for infrastructure dependencies.
"""
