from __future__ import annotations
from typing import Dict, Optional, Any
import hashlib, logging
from typing_extensions import TypedDict
from langgraph.graph import StateGraph, START, END

from ..agents.router import decide_language, decide_subject
from ..agents.tutor import answer_question
from ..services.speech import synthesize_speech
from ..stores.interaction_store import InteractionStore
from ..qa.scorer import ResponseQualityScorer, default_scorer
from ..models.interaction import InteractionRecord
from ..domain.catalog import language_name
from ..config import settings
from ..telemetry import trace

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Graph state
# ---------------------------------------------------------------------------

class AState(TypedDict, total=False):
    question: str
    language: Optional[str]
    subject: Optional[str]
    grade: Optional[int]
    retry_count: int
    speak: bool

    # computed
    language_r: str
    subject_r: str
    answer: str
    subject_name: str
    grade_name: Optional[str]
    tokens_used: Optional[int]
    response_time: float
    audio_path: Optional[str]
    quality: Dict[str, Any]
    session_id: str

# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

async def n_prepare(state: AState) -> AState:
    lang = decide_language(state["question"], state.get("language"))
    subj = decide_subject(state["question"], state.get("subject"))
    trace.bind(language=lang, subject=subj, grade=state.get("grade"))
    trace.log("prepare")
    return {**state, "language_r": lang, "subject_r": subj}

async def n_answer(state: AState) -> AState:
    out = await answer_question(
        question=state["question"],
        language=state["language_r"],
        subject=state["subject_r"],
        grade=state.get("grade"),
    )
    trace.log("answer", chars=len(out.answer), tokens=out.tokens_used)
    return {**state, "answer": out.answer, "subject_name": out.subject_name, "grade_name": out.grade,
            "tokens_used": out.tokens_used, "response_time": out.latency_ms}

async def n_speak(state: AState) -> AState:
    if not state.get("speak", True):
        return {**state, "audio_path": None}
    path = await synthesize_speech(state["answer"], state["language_r"])
    return {**state, "audio_path": path}

def build_graph(store: InteractionStore, scorer: ResponseQualityScorer):

    async def n_score(state: AState) -> AState:
        q = scorer.score(state["question"], state["answer"], state["language_r"], state["subject_r"])
        trace.log("score", overall=q.overall_score, degraded=q.degraded)
        return {**state, "quality": q.model_dump(by_alias=True)}

    async def n_record(state: AState) -> AState:
        q = state["quality"]
        rec = await store.create(InteractionRecord(
            question=state["question"],
            answer=state["answer"],
            language=state["language_r"],
            subject=state["subject_r"],
            grade=state.get("grade"),
            retry_count=state.get("retry_count", 0),
            response_time=state.get("response_time"),
            tokens_used=state.get("tokens_used"),
            response_quality=q["overallScore"],
            quality_metrics=q["metrics"],
        ))
        trace.bind(session_id=rec.id)
        trace.log("record")
        return {**state, "session_id": rec.id}

    g = StateGraph(AState)
    g.add_node("prepare", n_prepare)
    g.add_node("answer", n_answer)
    g.add_node("speak", n_speak)
    g.add_node("score", n_score)
    g.add_node("record", n_record)

    g.add_edge(START, "prepare")
    g.add_edge("prepare", "answer")
    g.add_edge("answer", "speak")
    g.add_edge("speak", "score")
    g.add_edge("score", "record")
    g.add_edge("record", END)
    return g.compile()

# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

async def run_ask_graph(*, question: str, language: Optional[str], subject: Optional[str],
                        grade: Optional[int], retry_count: int = 0, speak: bool = True,
                        store: Optional[InteractionStore] = None,
                        scorer: Optional[ResponseQualityScorer] = None,
                        debug: bool = False) -> Dict:
    tid = "ask:" + hashlib.sha1(question.encode("utf-8")).hexdigest()[:16]
    trace.start(tid, retry_count=retry_count, speak=speak)
    log.info("ask_graph.start", extra={"language": language, "subject": subject, "grade": grade})

    app = build_graph(store or InteractionStore(), scorer or default_scorer())
    out: AState = await app.ainvoke({
        "question": question,
        "language": language,
        "subject": subject,
        "grade": grade,
        "retry_count": retry_count,
        "speak": speak,
    })

    payload = {
        "session_id": out["session_id"],
        "question": question,
        "answer": out["answer"],
        "language": out["language_r"],
        "language_name": language_name(out["language_r"]),
        "subject": out["subject_r"],
        "subject_name": out["subject_name"],
        "grade": out.get("grade_name"),
        "audio_path": out.get("audio_path"),
        "quality": out["quality"],
    }
    if debug and settings.trace_prompts:
        payload["trace"] = trace.get()
    return payload
