from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException, UploadFile, File, Form, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field, AliasChoices
from .config import settings
from .logging_conf import setup_logging
from .domain.catalog import LANGUAGES, SUBJECTS, GRADES
from .models.interaction import CamelModel, FeedbackUpdate
from .pipelines.ask_graph import run_ask_graph
from .services.speech import transcribe_audio
from .stores.interaction_store import InteractionStore
from .qa.scorer import ResponseQualityScorer
from .qa.types import QualityScore
from .api.dependencies import get_store, get_scorer
from .api.routers import analytics

setup_logging(settings.log_level)
app = FastAPI(title="Regional Language AI Tutor API", version="1.0.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    allow_credentials=True,
)
app.mount("/audio", StaticFiles(directory=settings.audio_dir), name="audio")
app.include_router(analytics.router)

AUDIO_MIME_FALLBACK = "application/octet-stream"  # what browsers send for recorded blobs

class AskRequest(BaseModel):
    question: str
    language: Optional[str] = Field(default=None, description="e.g. 'hi', 'ta'; detected when omitted")
    subject: Optional[str] = None
    grade: Optional[int] = None
    retry_count: int = Field(default=0, ge=0, validation_alias=AliasChoices("retryCount", "retry_count"))
    speak: bool = True
    debug: bool = Field(default=False, description="attach the pipeline trace when prompt tracing is on")

class AskResponse(CamelModel):
    success: bool = True
    session_id: str
    question: str
    answer: str
    language: str
    language_name: str
    subject: str
    subject_name: str
    grade: Optional[str] = None
    audio_url: Optional[str] = None
    quality: QualityScore
    trace: Optional[Dict[str, Any]] = None
    timestamp: str

class ScoreRequest(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None
    language: Optional[str] = "en"
    subject: Optional[str] = None

class FeedbackRequest(FeedbackUpdate):
    session_id: str

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def _languages():
    return [{"code": code, "name": lang.name} for code, lang in LANGUAGES.items()]

@app.get("/")
async def root():
    return {"message": "Regional Language AI Tutor API", "version": app.version, "supportedLanguages": _languages()}

@app.get("/api/languages")
async def languages():
    return {"languages": _languages()}

@app.get("/api/subjects")
async def subjects():
    return {"subjects": [{"code": s.code, "name": s.name, "icon": s.icon} for s in SUBJECTS.values()]}

@app.get("/api/grades")
async def grades():
    return {"grades": [{"code": g.code, "name": g.name, "complexity": g.complexity} for g in GRADES.values()]}

@app.get("/api/health")
async def health():
    return {"status": "healthy", "timestamp": _now_iso()}

@app.post("/api/transcribe")
async def transcribe(audio: Optional[UploadFile] = File(default=None), language: str = Form(default="hi")):
    if audio is None:
        raise HTTPException(status_code=400, detail="Audio file is required")
    ctype = audio.content_type or AUDIO_MIME_FALLBACK
    if not (ctype.startswith("audio/") or ctype == AUDIO_MIME_FALLBACK):
        raise HTTPException(status_code=400, detail="Only audio files are allowed")
    if language not in LANGUAGES:
        raise HTTPException(status_code=400, detail="Unsupported language")
    data = await audio.read()
    if len(data) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"Audio file exceeds {settings.max_upload_mb}MB")
    try:
        text = await transcribe_audio(data, audio.filename or "audio.webm", language)
    except Exception as e:
        logger.exception("/api/transcribe failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "success": True,
        "transcription": text,
        "language": language,
        "languageName": LANGUAGES[language].name,
        "timestamp": _now_iso(),
    }

@app.post("/api/ask", response_model=AskResponse)
async def ask(req: AskRequest, store: InteractionStore = Depends(get_store),
              scorer: ResponseQualityScorer = Depends(get_scorer)):
    if not req.question.strip():
        raise HTTPException(status_code=400, detail="Question is required")
    if req.language is not None and req.language not in LANGUAGES:
        raise HTTPException(status_code=400, detail="Unsupported language")
    if req.grade is not None and req.grade not in GRADES:
        raise HTTPException(status_code=400, detail="Unsupported grade level")
    try:
        res = await asyncio.wait_for(
            run_ask_graph(
                question=req.question.strip(),
                language=req.language,
                subject=req.subject,
                grade=req.grade,
                retry_count=req.retry_count,
                speak=req.speak,
                debug=req.debug,
                store=store,
                scorer=scorer,
            ),
            timeout=settings.request_timeout_s,
        )
    except asyncio.TimeoutError:
        logger.warning("/api/ask timed out after %ss", settings.request_timeout_s)
        raise HTTPException(status_code=504, detail="The request took too long to process. Please try again.")
    except Exception as e:
        logger.exception("/api/ask failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    audio = res.pop("audio_path")
    return AskResponse(
        **res,
        audio_url=f"{settings.public_base_url.rstrip('/')}{audio}" if audio else None,
        timestamp=_now_iso(),
    )

@app.post("/api/quality/score", response_model=QualityScore)
async def quality_score(req: ScoreRequest, scorer: ResponseQualityScorer = Depends(get_scorer)):
    # the scorer never raises; a failed computation comes back zeroed
    return scorer.score(req.question, req.answer, req.language, req.subject)

@app.post("/api/feedback")
async def feedback(req: FeedbackRequest, store: InteractionStore = Depends(get_store)):
    try:
        rec = await store.update_feedback(req.session_id, FeedbackUpdate(**req.model_dump(exclude={"session_id"})))
    except Exception as e:
        logger.exception("/api/feedback failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    if rec is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True, "sessionId": rec.id}

def main() -> None:
    import uvicorn
    uvicorn.run("tara.server:app", host=settings.host, port=settings.port, log_config=None)

if __name__ == "__main__":
    main()
