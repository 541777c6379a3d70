"""
Package marker for the service booking marketplace backend.
It groups the API layer and the shared settings/logging helpers under one import path.
Most functionality lives in the sibling modules; this file intentionally stays lightweight.
"""
