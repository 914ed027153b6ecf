"""
kepctl - Query Kubernetes Enhancement Proposals (KEPs).

A CLI tool that:
1. Locates a local clone of the enhancements repository
2. Reads the KEPs owned by one or more SIGs
3. Optionally adds KEPs from open GitHub pull requests
4. Filters them by status and stage and prints a report

Usage:
    kepctl query --sig node --status implementable
    kepctl query --sig api-machinery --stage beta --include-prs
"""

__version__ = "0.1.0"
