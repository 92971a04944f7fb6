"""Vendor backend endpoint modules (internal)."""
