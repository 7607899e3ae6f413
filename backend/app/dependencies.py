from fastapi.requests import HTTPConnection

from .container import ServiceContainer


def get_services(conn: HTTPConnection) -> ServiceContainer:
    """Works for both HTTP and WebSocket routes"""
    return conn.app.state.services
