from fastapi import APIRouter, Depends

from tasktracker.dependencies import get_sessions, get_users
from tasktracker.schemas.session import SessionCreate, SessionOut
from tasktracker.schemas.user import UserCreate, UserOut

router = APIRouter(tags=["auth"])


@router.post("/users", response_model=UserOut, status_code=201)
def register(user: UserCreate, users=Depends(get_users)):
    return users.register(user.name, user.email, user.password)


@router.post("/sessions", response_model=SessionOut, status_code=201)
def login(credentials: SessionCreate, sessions=Depends(get_sessions)):
    return sessions.login(credentials.email, credentials.password)
