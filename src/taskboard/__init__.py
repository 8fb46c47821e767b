"""Taskboard — shared, role-gated todo tracking API.

Administrators manage a shared pool of categorized, prioritized,
assignable todos; regular users browse and filter the todos that
concern them.
"""

__version__ = "0.1.0"
