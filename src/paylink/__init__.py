"""Attach incoming payments to the outstanding sales invoices they settle."""

__version__ = "0.1.0"
