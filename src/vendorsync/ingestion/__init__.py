"""Ingestion helpers.

Everything that turns raw backend or push payloads into typed models lives
here, so the state/store layer only ever sees validated values.
"""
