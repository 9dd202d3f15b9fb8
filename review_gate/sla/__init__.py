"""
SLA Tracking Module
===================

Bounded Context for review deadlines on AI-generated artifacts.

Responsibilities:
- Calculate SLA deadlines from a project's per-risk-level hours
- Track status through within_sla -> approaching_sla -> breached -> escalated
- Escalate overdue reviews to a named reviewer
- Aggregate compliance metrics per project
- Sweep open SLAs and notify on warnings and breaches
"""

__version__ = "1.0.0"
