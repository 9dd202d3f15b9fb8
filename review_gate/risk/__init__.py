"""
Risk Assessment Module
======================

Bounded Context for scoring AI-generated artifacts and deciding how much
human review they need.

Responsibilities:
- Combine artifact type, AI confidence, change scope and historical
  rejection rate into a 0-100 risk score
- Map scores to risk levels via per-project thresholds
- Decide whether an artifact may be auto-approved
- Read and validate per-project approval settings
"""

__version__ = "1.0.0"
