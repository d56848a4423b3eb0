"""API layer: compose a page, then present it.

1. No SQL here - scopes go through the query strategies
2. Return Pydantic models only
"""
