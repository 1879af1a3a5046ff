from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from tasktracker.dependencies import current_session, get_tasks
from tasktracker.schemas.task import TaskCreate, TaskUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
def list_tasks(
    q: Optional[str] = Query(None, description="Search by name"),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    session: dict = Depends(current_session),
    tasks=Depends(get_tasks),
):
    """If page and limit are provided, return paginated result dict {items,page,limit,total,pages}.
    Otherwise return the plain list.
    """
    items = tasks.list(session["userId"], query=q)
    if page is None or limit is None:
        return items

    # normalize page/limit
    if page < 1:
        page = 1
    if limit < 1:
        limit = 10
    total = len(items)
    pages = ceil(total / limit) if total > 0 else 1
    start = (page - 1) * limit
    return {"items": items[start:start + limit], "page": page, "limit": limit, "total": total, "pages": pages}


@router.post("", status_code=201)
def create_task(task: TaskCreate, session: dict = Depends(current_session), tasks=Depends(get_tasks)):
    return tasks.create(session["userId"], task.model_dump())


@router.put("/{task_id}")
def update_task(task_id: int, patch: TaskUpdate, session: dict = Depends(current_session), tasks=Depends(get_tasks)):
    fields = patch.model_dump(exclude_unset=True)
    fields.update(patch.model_extra or {})
    return tasks.update(session["userId"], task_id, fields)


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: int, session: dict = Depends(current_session), tasks=Depends(get_tasks)):
    tasks.delete(session["userId"], task_id)
    return Response(status_code=204)
