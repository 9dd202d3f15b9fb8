"""
SLA Interfaces Layer
====================

Interface adapters (controllers) for SLA tracking module.

Contains:
- Controllers: FastAPI route handlers

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from review_gate.sla.interfaces.controllers import router as sla_router

__all__ = ["sla_router"]
