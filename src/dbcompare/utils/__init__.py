"""
Utility modules for dbcompare

Provides:
- dialect: SQL dialect enumeration and per-dialect syntax
- sql_safety: identifier validation and quoting
- logging: structured logging setup
- metrics: Prometheus collectors for queries and table comparisons
- tracing: OpenTelemetry span helpers
"""

__all__ = ["dialect", "sql_safety", "logging", "metrics", "tracing"]
