"""REST API exposing the validators as a gate in front of the renderer."""
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Body, FastAPI, HTTPException
from pydantic import BaseModel

from avatarguard.models.report import ValidationReport
from avatarguard.tools.definition_validator import validate_definition
from avatarguard.tools.json_schema import schema_for
from avatarguard.tools.options_validator import validate_options
from avatarguard.utils.config import settings

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="avatarguard")


class HealthResponse(BaseModel):
    status: str
    max_depth: int


@app.get("/api/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", max_depth=settings.max_depth)


@app.post("/api/validate/definition", response_model=ValidationReport)
def validate_definition_endpoint(document: Any = Body(...)) -> ValidationReport:
    report = validate_definition(document)
    if not report.valid:
        logger.info("Rejected definition", extra={"violations": len(report.violations)})
    return report


@app.post("/api/validate/options", response_model=ValidationReport)
def validate_options_endpoint(options: Any = Body(...)) -> ValidationReport:
    report = validate_options(options)
    if not report.valid:
        logger.info("Rejected options", extra={"violations": len(report.violations)})
    return report


@app.get("/api/schema/{kind}")
def get_schema(kind: str) -> Dict[str, Any]:
    try:
        return schema_for(kind)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
