"""Verification submission and progress endpoints."""

import logging
import secrets
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from organic_verifier.api.dependencies import (
    get_batch_runner,
    get_progress_store,
    get_settings_dependency,
)
from organic_verifier.api.models import VerifyResponse, VerifyTextRequest
from organic_verifier.config.settings import Settings
from organic_verifier.services.parsing.input_parser import (
    ParseResult,
    parse_csv,
    parse_spreadsheet,
    parse_text_input,
)
from organic_verifier.services.progress.store import ProgressStore
from organic_verifier.services.verification.batch_runner import BatchRunner

logger = logging.getLogger(__name__)

router = APIRouter()

_SPREADSHEET_EXTENSIONS = (".xlsx", ".xls")
_ALLOWED_EXTENSIONS = (".csv", *_SPREADSHEET_EXTENSIONS)


def _start_session(
    parsed: ParseResult,
    source: str,
    store: ProgressStore,
    runner: BatchRunner,
) -> VerifyResponse:
    """Create a session for parsed operations and submit the batch."""
    if parsed.errors and not parsed.operations:
        raise HTTPException(
            status_code=400,
            detail={"error": f"Failed to parse {source}", "details": parsed.errors},
        )
    if parsed.errors:
        logger.warning("Parsing warnings for %s: %s", source, parsed.errors)

    session_id = secrets.token_hex(16)
    try:
        store.create(session_id, len(parsed.operations))
        runner.submit(parsed.operations, session_id)
    except Exception as e:
        logger.error(f"Error starting verification session: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e
    logger.info("Session %s submitted with %d operations", session_id, len(parsed.operations))
    return VerifyResponse(session_id=session_id, total=len(parsed.operations))


@router.post("/verify", response_model=VerifyResponse)
async def verify_upload(
    file: UploadFile | None = File(None),  # noqa: B008
    settings: Settings = Depends(get_settings_dependency),  # noqa: B008
    store: ProgressStore = Depends(get_progress_store),  # noqa: B008
    runner: BatchRunner = Depends(get_batch_runner),  # noqa: B008
) -> VerifyResponse:
    """
    Submit a CSV or XLSX/XLS upload for verification.

    Returns a session token; poll ``/progress/{session_id}`` for results.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    filename = file.filename.lower()
    if not filename.endswith(_ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only CSV and XLSX files are allowed.",
        )

    data = await file.read()
    if len(data) > settings.upload_max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {settings.upload_max_bytes} byte upload limit",
        )

    if filename.endswith(_SPREADSHEET_EXTENSIONS):
        parsed = parse_spreadsheet(data)
    else:
        try:
            parsed = parse_csv(data.decode("utf-8-sig"))
        except UnicodeDecodeError as e:
            raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded") from e

    return _start_session(parsed, "file", store, runner)


@router.post("/verify-text", response_model=VerifyResponse)
async def verify_text(
    request: VerifyTextRequest,
    store: ProgressStore = Depends(get_progress_store),  # noqa: B008
    runner: BatchRunner = Depends(get_batch_runner),  # noqa: B008
) -> VerifyResponse:
    """Submit pasted pipe-delimited text for verification."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="No text provided")
    return _start_session(parse_text_input(request.text), "text", store, runner)


@router.get("/progress/{session_id}")
async def get_progress(
    session_id: str,
    store: ProgressStore = Depends(get_progress_store),  # noqa: B008
) -> dict[str, Any]:
    """
    Poll a verification session.

    Returns ``total``, ``completed``, ``current``, ``results``, ``status``
    and, in the error state, ``error``.
    """
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return session.to_dict()
