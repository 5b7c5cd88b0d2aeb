# daybook/routers/data.py
# table-generic endpoints: fetch / delete / bulk sort / completed flag
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.auth.dependencies import FormContext, verified_form
from daybook.db.database import get_db
from daybook.schemas.envelope import Envelope
from daybook.services.forms import InvalidRequest, id_list, require_int
from daybook.services.projects import apply_sort
from daybook.services.records import delete_records, fetch_rows
from daybook.services.todos import set_completed

logger = logging.getLogger(__name__)

router = APIRouter(tags=["data"])


def _as_list(value):
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


@router.post("/getData", response_model=Envelope, response_model_exclude_none=True)
def get_data(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    rows = fetch_rows(db, form.user_id, form.get("tableType"))
    return Envelope(success=True, data=rows)


@router.post("/delData", response_model=Envelope, response_model_exclude_none=True)
def del_data(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    """`id` may be a single value or an `id[i]` array."""
    if form.get("id") is None:
        raise InvalidRequest("id missing")
    delete_records(db, form.user_id, form.get("tableType"), id_list(form.get("id")))
    return Envelope(success=True)


@router.post("/sort", response_model=Envelope, response_model_exclude_none=True)
def sort(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    table_type = form.get("tableType")
    section_ids = form.get("sectionId")
    apply_sort(
        db,
        form.user_id,
        table_type,
        _as_list(form.get("id")),
        _as_list(form.get("sort")),
        _as_list(section_ids) if section_ids is not None else None,
    )
    logger.info("[sort] table=%s user=%s count=%d", table_type, form.user_id, len(_as_list(form.get("id"))))
    return Envelope(success=True)


@router.post("/completed", response_model=Envelope, response_model_exclude_none=True)
def completed(form: FormContext = Depends(verified_form), db: Session = Depends(get_db)):
    set_completed(db, form.user_id, require_int(form.get("id")), require_int(form.get("completed")))
    return Envelope(success=True)
