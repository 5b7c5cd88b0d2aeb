# daybook/routers/health.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.auth.dependencies import FormContext, verified_form
from daybook.db.database import get_db
from daybook.schemas.envelope import Envelope
from daybook.services.forms import InvalidRequest
from daybook.services.ledger import save_health, update_health

router = APIRouter(tags=["health"])


@router.post("/health", response_model=Envelope, response_model_exclude_none=True)
def health(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    # symptom flags arrive as "true"/"false" strings
    action = form.get("action")
    if action == "save":
        return Envelope(success=True, id=save_health(db, form.user_id, form.fields))
    if action == "update":
        update_health(db, form.user_id, form.fields)
        return Envelope(success=True)
    raise InvalidRequest(f"unknown action: {action!r}")
