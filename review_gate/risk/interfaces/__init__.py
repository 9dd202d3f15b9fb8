"""
Risk Interfaces Layer
=====================

FastAPI route handlers for risk assessment and approval settings.
"""

from review_gate.risk.interfaces.controllers import router as risk_router

__all__ = ["risk_router"]
