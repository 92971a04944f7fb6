"""State/store layer.

This package is the single source of truth for how cached data, remote
fetches and push-delivered notification inserts are merged into the state
published to dashboard screens.
"""
