from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


def _clean_name(v):
    if not v.strip():
        raise ValueError("name cannot be empty")
    return v.strip()


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    completed: bool = False

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v):
        return _clean_name(v)


class TaskUpdate(BaseModel):
    """Partial patch; only fields already on the task are applied."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        # defaults are not validated, so None here was sent explicitly
        if v is None:
            raise ValueError("name cannot be null")
        return _clean_name(v)

    @field_validator("completed")
    @classmethod
    def completed_not_null(cls, v):
        if v is None:
            raise ValueError("completed cannot be null")
        return v
