from datetime import datetime

from pydantic import BaseModel


class SessionCreate(BaseModel):
    # plain str: a malformed email is just another credential mismatch
    email: str
    password: str


class SessionOut(BaseModel):
    userId: int
    token: str
    createdAt: datetime
    displayName: str
