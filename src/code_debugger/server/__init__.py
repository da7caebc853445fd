"""HTTP server for the code debugger."""

from code_debugger.server.app import create_app

__all__ = ["create_app"]
