# daybook/routers/money.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.auth.dependencies import FormContext, verified_form
from daybook.db.database import get_db
from daybook.schemas.envelope import Envelope
from daybook.services.forms import InvalidRequest
from daybook.services.ledger import save_money, update_money

router = APIRouter(tags=["money"])


@router.post("/money", response_model=Envelope, response_model_exclude_none=True)
def money(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    action = form.get("action")
    if action == "save":
        return Envelope(success=True, id=save_money(db, form.user_id, form.fields))
    if action == "update":
        update_money(db, form.user_id, form.fields)
        return Envelope(success=True)
    raise InvalidRequest(f"unknown action: {action!r}")
