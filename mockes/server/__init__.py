"""
mock-es HTTP server.

Usage:
    # Start server
    uvicorn mockes.server:create_app --factory

    # Or programmatically
    from mockes.server import create_app

    app = create_app(handler=MockHandler(decide=my_decision))
"""

from mockes.server.app import create_app, handler_from_settings

__all__ = ["create_app", "handler_from_settings"]
