"""
Core Kernel Module

Foundational persistence and audit utilities for the estate planner.

Components:
- hashing: SHA256 audit logic for sealed projection snapshots
- estate_store: Encrypted SQLite store for estate plans and projections

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

__all__ = ['hashing', 'estate_store']
