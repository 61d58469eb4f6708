#smartcv/app/api/routes.py

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from pydantic import ValidationError

from smartcv.app.core.orchestrator import AnalysisFailure, AnalysisOrchestrator
from smartcv.app.core.records import RecordRepository
from smartcv.app.core.result import Unavailable
from smartcv.app.core.store import PlatformStore
from smartcv.app.models.platform_models import Document
from smartcv.app.models.record_models import (
    AnalysisFailureResponse,
    AnalysisRecord,
    HealthResponse,
    RecordListResponse,
    SessionResponse,
)


api_router = APIRouter()


def get_store(request: Request) -> PlatformStore:
    return request.app.state.store


def _session_response(store: PlatformStore) -> SessionResponse:
    state = store.state
    return SessionResponse(
        status=state.session.status.value,
        is_loading=state.is_loading,
        capabilities_ready=state.capabilities_ready,
        error=state.last_error,
        identity=state.session.identity,
    )


def _require_session(store: PlatformStore) -> None:
    if not store.state.capabilities_ready:
        raise HTTPException(status_code=503, detail=store.state.last_error or "platform unavailable")
    if not store.auth.is_authenticated:
        raise HTTPException(status_code=401, detail="Sign in to continue.")


@api_router.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(store: PlatformStore = Depends(get_store)):
    return HealthResponse(capabilities_ready=store.state.capabilities_ready)

# ------------ Session ------------
@api_router.get("/auth/status", response_model=SessionResponse, tags=["Auth"])
async def auth_status(store: PlatformStore = Depends(get_store)):
    return _session_response(store)

@api_router.post("/auth/sign-in", response_model=SessionResponse, tags=["Auth"])
async def sign_in(store: PlatformStore = Depends(get_store)):
    await store.auth.sign_in()
    return _session_response(store)

@api_router.post("/auth/sign-out", response_model=SessionResponse, tags=["Auth"])
async def sign_out(store: PlatformStore = Depends(get_store)):
    await store.auth.sign_out()
    return _session_response(store)

@api_router.post("/auth/refresh", response_model=SessionResponse, tags=["Auth"])
async def refresh(store: PlatformStore = Depends(get_store)):
    await store.auth.refresh()
    return _session_response(store)

@api_router.delete("/error", response_model=SessionResponse, tags=["Auth"])
async def clear_error(store: PlatformStore = Depends(get_store)):
    store.clear_error()
    return _session_response(store)

# ------------ Analysis ------------
@api_router.post("/analyze", response_model=AnalysisRecord, tags=["Analysis"])
async def analyze(
    request: Request,
    company_name: str = Form(""),
    job_title: str = Form(...),
    job_description: str = Form(...),
    file: UploadFile = File(...),
    store: PlatformStore = Depends(get_store),
):
    """Upload a resume PDF and run the full feedback pipeline. Returns the stored record."""
    _require_session(store)

    limit = request.app.state.settings.MAX_UPLOAD_BYTES
    if file.size is not None and file.size > limit:
        raise HTTPException(status_code=413, detail="Uploaded file is too large.")
    # size may be unknown; never read more than one byte past the limit
    content = await file.read(limit + 1)
    if not content:
        raise HTTPException(status_code=422, detail="Uploaded file is empty.")
    if len(content) > limit:
        raise HTTPException(status_code=413, detail="Uploaded file is too large.")

    document = Document(
        name=file.filename or "resume.pdf",
        content=content,
        content_type=file.content_type or "application/pdf",
    )
    outcome = await AnalysisOrchestrator(store).analyze(company_name, job_title, job_description, document)
    if isinstance(outcome, AnalysisFailure):
        failure = AnalysisFailureResponse(stage=outcome.stage, status=outcome.status)
        raise HTTPException(status_code=502, detail=failure.model_dump(mode="json"))
    return outcome.value

# ------------ Records ------------
@api_router.get("/records", response_model=RecordListResponse, tags=["Records"])
async def list_records(store: PlatformStore = Depends(get_store)):
    _require_session(store)
    res = await RecordRepository(store.kv).list()
    if isinstance(res, Unavailable):
        raise HTTPException(status_code=503, detail=res.reason)
    return RecordListResponse(records=res.value)

@api_router.get("/records/{record_id}", response_model=AnalysisRecord, tags=["Records"])
async def get_record(record_id: str, store: PlatformStore = Depends(get_store)):
    _require_session(store)
    try:
        res = await RecordRepository(store.kv).get(record_id)
    except ValidationError:
        raise HTTPException(status_code=422, detail="Stored record could not be decoded.")
    if isinstance(res, Unavailable):
        raise HTTPException(status_code=503, detail=res.reason)
    if res.value is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return res.value
