from fastapi import Request

from tasktracker.errors import Unauthenticated


def get_users(request: Request):
    return request.app.state.users


def get_sessions(request: Request):
    return request.app.state.sessions


def get_tasks(request: Request):
    return request.app.state.tasks


def current_session(request: Request) -> dict:
    """Session resolved by the authorization gate for this request."""
    session = getattr(request.state, "session", None)
    if session is None:
        raise Unauthenticated()
    return session
