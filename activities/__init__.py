"""
Activities module - client activity log.

This module handles:
- ActivityEvent entity (append-only)
- Activity aggregation (per action, per day, posting rollups)
- Activity logging and statistics queries
"""
