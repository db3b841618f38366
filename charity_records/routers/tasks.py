from fastapi import APIRouter, Depends

from charity_records import crud
from charity_records.auth import get_store, require_user
from charity_records.schemas import TaskIn, User
from charity_records.services import queries
from charity_records.store import DocumentStore

router = APIRouter(prefix="/tasks")


@router.get("")
async def list_tasks(store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    return [t.model_dump(by_alias=True) for t in queries.user_tasks(store.document, user)]


@router.post("", status_code=201)
async def add_task(data: TaskIn, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    document, task = crud.add_task(store.document, user.id, data.text)
    store.commit(document)
    return task.model_dump(by_alias=True)


@router.put("/{task_id}")
async def edit_task(task_id: int, data: TaskIn, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    store.commit(crud.update_task_text(store.document, user.id, task_id, data.text))
    return {"id": task_id}


@router.post("/{task_id}/toggle")
async def toggle_task(task_id: int, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    store.commit(crud.toggle_task(store.document, user.id, task_id))
    return {"id": task_id}


@router.delete("/{task_id}")
async def delete_task(task_id: int, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    store.commit(crud.delete_task(store.document, user.id, task_id))
    return {"deleted": [task_id]}
