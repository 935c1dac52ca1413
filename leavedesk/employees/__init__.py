"""Employees module — employee records, HR administration, balance lookups."""
