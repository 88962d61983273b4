"""
FastAPI dependencies shared by the routers.
"""
from fastapi import Request

from mockes.handler import MockHandler


def get_handler(request: Request) -> MockHandler:
    """The MockHandler the app was created with."""
    return request.app.state.handler
