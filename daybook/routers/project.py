# daybook/routers/project.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.auth.dependencies import FormContext, verified_form
from daybook.db.database import get_db
from daybook.schemas.envelope import Envelope
from daybook.services.forms import InvalidRequest
from daybook.services.projects import save_project, save_section, update_project_field, update_section

router = APIRouter(tags=["project"])


@router.post("/project", response_model=Envelope, response_model_exclude_none=True)
def project(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    """
    save   : name, end, completed, memo
    update : id, type=<field>, <field>=<value>
    """
    action = form.get("action")
    if action == "save":
        return Envelope(success=True, id=save_project(db, form.user_id, form.fields))
    if action == "update":
        update_project_field(db, form.user_id, form.fields)
        return Envelope(success=True)
    raise InvalidRequest(f"unknown action: {action!r}")


@router.post("/section", response_model=Envelope, response_model_exclude_none=True)
def section(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    action = form.get("action")
    if action == "save":
        return Envelope(success=True, id=save_section(db, form.user_id, form.fields))
    if action == "update":
        update_section(db, form.user_id, form.fields)
        return Envelope(success=True)
    raise InvalidRequest(f"unknown action: {action!r}")
