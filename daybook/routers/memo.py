# daybook/routers/memo.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.auth.dependencies import FormContext, verified_form
from daybook.db.database import get_db
from daybook.schemas.envelope import Envelope
from daybook.services.forms import InvalidRequest
from daybook.services.memos import save_memo, save_monthly_memo, update_memo_field, update_monthly_memo

router = APIRouter(tags=["memo"])


@router.post("/memo", response_model=Envelope, response_model_exclude_none=True)
def memo(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    action = form.get("action")
    if action == "save":
        return Envelope(success=True, id=save_memo(db, form.user_id, form.fields))
    if action == "update":
        update_memo_field(db, form.user_id, form.fields)
        return Envelope(success=True)
    raise InvalidRequest(f"unknown action: {action!r}")


@router.post("/monthlyMemo", response_model=Envelope, response_model_exclude_none=True)
def monthly_memo(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    action = form.get("action")
    if action == "save":
        return Envelope(success=True, id=save_monthly_memo(db, form.user_id, form.fields))
    if action == "update":
        update_monthly_memo(db, form.user_id, form.fields)
        return Envelope(success=True)
    raise InvalidRequest(f"unknown action: {action!r}")
