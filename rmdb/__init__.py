"""Index key layout, query analysis, planning, result output and a socket client for a small database."""

__version__ = "0.1.0"