"""
Infrastructure Layer
=====================

Low-level technical concerns shared by all bounded contexts:
- Logging setup
- ORM models for records owned by the surrounding system (projects, artifacts)
"""
