from typing import Any, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from testflow.translators.assertion_suggester import (
    build_assertions,
    extract_json_paths,
    filter_paths,
)

router = APIRouter(prefix="/assertions", tags=["assertions"])


class ResponsePayload(BaseModel):
    data: Any = None
    filter: Optional[str] = None


class SuggestPayload(BaseModel):
    data: Any = None
    selected_paths: List[str] = []
    status_code: Optional[int] = None


@router.post("/paths", response_model=dict)
async def list_paths(payload: ResponsePayload):
    paths = extract_json_paths(payload.data)
    if payload.filter:
        paths = filter_paths(paths, payload.filter)
    return {"paths": paths}


@router.post("/suggest", response_model=dict)
async def suggest_assertions(payload: SuggestPayload):
    """
    Proposes one assertion per selected path from the value captured there,
    plus a statusCode assertion when the response status is known.
    """
    assertions = build_assertions(payload.data, payload.selected_paths, payload.status_code)
    return {"assertions": [assertion.to_document() for assertion in assertions]}
