"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded
contexts (Risk Assessment and SLA Tracking).

Architecture Pattern: Modular Monolith
- Each module (risk, sla) is a bounded context
- Shared kernel contains only generic infrastructure
- Project and artifact records are owned by the surrounding system and only read

DO NOT add business logic from Risk or SLA to shared kernel.
"""

__version__ = "1.0.0"
