# daybook/routers/todo.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.auth.dependencies import FormContext, verified_form
from daybook.db.database import get_db
from daybook.schemas.envelope import Envelope
from daybook.services.forms import InvalidRequest
from daybook.services.todos import save_todo, update_todo

router = APIRouter(tags=["todo"])


@router.post("/todo", response_model=Envelope, response_model_exclude_none=True)
def todo(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    """
    action=save   -> {success, id, timeTakenIds}
    action=update -> {success, timeTakenIds}  (every previous interval is replaced)
    """
    action = form.get("action")
    if action == "save":
        todo_id, time_taken_ids = save_todo(db, form.user_id, form.fields)
        return Envelope(success=True, id=todo_id, timeTakenIds=time_taken_ids)
    if action == "update":
        time_taken_ids = update_todo(db, form.user_id, form.fields)
        return Envelope(success=True, timeTakenIds=time_taken_ids)
    raise InvalidRequest(f"unknown action: {action!r}")
