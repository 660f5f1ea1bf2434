from typing import Any, Dict

from fastapi import APIRouter

from testflow.models import validate_test_suite

router = APIRouter(prefix="/suites", tags=["suites"])


@router.post("/validate", response_model=dict)
async def validate_suite(suite: Dict[str, Any]):
    return validate_test_suite(suite).to_document()
