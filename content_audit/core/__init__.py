"""
Core components for the content audit engine.

Contains:
- Base class for rules
- Data models (Article, Issue, AuditResult, etc.)
- Execution context builder
- Shared text helpers and issue consolidation
"""
