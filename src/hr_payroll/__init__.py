"""HR payroll, leave and benefits core."""

__version__ = "0.1.0"
