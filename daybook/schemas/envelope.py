# daybook/schemas/envelope.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class Envelope(BaseModel):
    """
    Response body of every endpoint.
    - success only        : update / delete / sort
    - id (+ timeTakenIds) : create
    - data                : fetch
    - userId + csrfToken  : login / session restore
    """
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    error: Optional[str] = None
    id: Optional[int] = None
    ids: Optional[List[int]] = None
    timeTakenIds: Optional[List[int]] = None
    data: Optional[List[Dict[str, Any]]] = None
    userId: Optional[int] = None
    csrfToken: Optional[str] = None
