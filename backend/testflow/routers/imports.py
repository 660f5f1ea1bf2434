import logging
import uuid
from typing import Optional

import httpx
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from testflow.config import settings
from testflow.models import TestSuite
from testflow.translators.curl_translator import CurlImportError, CurlTranslator
from testflow.translators.playwright_translator import PlaywrightTranslator
from testflow.translators.swagger_translator import SwaggerImportError, SwaggerTranslator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/import", tags=["import"])


class PlaywrightPayload(BaseModel):
    code: str
    suite_name: Optional[str] = None
    application_name: Optional[str] = None


class CurlPayload(BaseModel):
    command: str
    suite_name: Optional[str] = None


class ApiSpecPayload(BaseModel):
    swagger_url: Optional[str] = None  # URL of swagger.json/yaml
    swagger_text: Optional[str] = None  # or the document itself


def _with_id(suite: TestSuite, prefix: str) -> TestSuite:
    return suite.model_copy(update={"id": f"{prefix}{uuid.uuid4()}"})


@router.post("/playwright", response_model=dict)
async def import_playwright(payload: PlaywrightPayload):
    """
    Converts a recorded Playwright test into a UI suite.
    Unrecognized lines are skipped, so an empty step list is a valid answer.
    """
    if not payload.code.strip():
        raise HTTPException(status_code=400, detail="Please enter Playwright code to parse")

    translator = PlaywrightTranslator(
        default_test_name=settings.default_test_name,
        default_application_name=settings.default_application_name,
    )
    parsed = translator.parse(payload.code)
    suite = translator.generate_test_suite(parsed, payload.suite_name, payload.application_name)
    logger.info("Parsed %d Playwright steps for %r", len(parsed.test_steps), parsed.test_name)

    return {
        "parsed": parsed.to_document(),
        "test_suite": _with_id(suite, "playwright-suite-").to_document(),
        "step_count": len(parsed.test_steps),
    }


@router.post("/curl", response_model=dict)
async def import_curl(payload: CurlPayload):
    try:
        suite = CurlTranslator().translate(payload.command, payload.suite_name)
    except CurlImportError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return {"test_suite": _with_id(suite, "curl-suite-").to_document()}


@router.post("/swagger", response_model=dict)
async def import_swagger(payload: ApiSpecPayload):
    """
    Builds an API suite from an OpenAPI/Swagger document.

    Accepts either:
    - swagger_url: URL of swagger.json/yaml, fetched here
    - swagger_text: the document text (JSON or YAML)
    """
    if payload.swagger_url:
        logger.info("Fetching spec from URL: %s", payload.swagger_url)
        async with httpx.AsyncClient(timeout=settings.swagger_fetch_timeout, follow_redirects=True) as client:
            try:
                response = await client.get(payload.swagger_url)
                response.raise_for_status()
            except httpx.InvalidURL as e:
                raise HTTPException(status_code=400, detail=f"Invalid Swagger URL format: {e}")
            except httpx.HTTPStatusError as e:
                raise HTTPException(
                    status_code=502,
                    detail=f"Failed to fetch Swagger from URL: {e.response.status_code}",
                )
            except httpx.HTTPError as e:
                raise HTTPException(status_code=502, detail=f"Failed to fetch Swagger from URL: {e}")
        spec_content = response.text
    elif payload.swagger_text:
        spec_content = payload.swagger_text
    else:
        raise HTTPException(status_code=400, detail="Either swagger_url or swagger_text must be provided")

    translator = SwaggerTranslator(default_content_type=settings.default_content_type)
    try:
        suite = translator.translate_text(spec_content)
    except SwaggerImportError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return {
        "test_suite": _with_id(suite, "generated_").to_document(),
        "test_count": len(suite.test_cases),
        "source": payload.swagger_url if payload.swagger_url else "inline spec",
    }
