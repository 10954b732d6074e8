"""
FastAPI Backend for the SOCRATIX Socratic Tutor

Thin request boundary over the session orchestrator:
- One route per orchestrator operation, sessions keyed by id
- Labeled tutor failures mapped to JSON error bodies
- Structured request/response logging
"""

import logging
import time
from typing import Optional, List, Dict, Any

import uvicorn
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from backend.lib.logger import setup_logging, get_logger
from socratix_tutor.config import Config
from socratix_tutor.errors import TutorError
from socratix_tutor.llm_client import OpenAILLMService
from socratix_tutor.orchestrator import SocraticOrchestrator

setup_logging(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO), use_colors=True)
logger = get_logger("backend.main")

# Singleton orchestrator; sessions live inside it for the process lifetime
_orchestrator_instance: Optional[SocraticOrchestrator] = None


def get_orchestrator() -> SocraticOrchestrator:
    """Get or create singleton SocraticOrchestrator instance."""
    global _orchestrator_instance
    if _orchestrator_instance is None:
        Config.validate_config()
        _orchestrator_instance = SocraticOrchestrator(llm=OpenAILLMService())
    return _orchestrator_instance


app = FastAPI(
    title="SOCRATIX Socratic Tutor API",
    description="Socratic reasoning sessions with curriculum roadmaps, scaffolding and synthesis",
    version="2.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Pydantic Models ====================

class InitRequest(BaseModel):
    topic: Optional[str] = None


class ResetRequest(BaseModel):
    topic: Optional[str] = None


class CalibrationRequest(BaseModel):
    calibration_responses: List[str] = []


class AnswerRequest(BaseModel):
    answer: Optional[str] = None
    confidence: int = 50


class SynthesisMemoRequest(BaseModel):
    synthesis_memo: Optional[str] = None


class ConfusedQuestionsRequest(BaseModel):
    count: int = 3


class RegressionInfo(BaseModel):
    previous_step: int
    target_step: int
    directive: str


class AnswerResponse(BaseModel):
    question: str
    depth: int
    question_type: str
    confidence: int
    consistency_score: int
    assertion_count: int
    contradiction_detected: bool
    loop_warning: Optional[str] = None
    misconception_kind: Optional[str] = None
    regression: Optional[RegressionInfo] = None
    advanced: bool
    ready_for_synthesis: bool
    phase: str
    current_step: int


class ScaffoldResult(BaseModel):
    level: int
    level_name: Optional[str]
    message: str
    max_reached: bool


class AdvanceResponse(BaseModel):
    advanced: bool
    current_step: int
    reason: Optional[str] = None


# ==================== Error Handling ====================

@app.exception_handler(TutorError)
async def tutor_error_handler(request: Request, exc: TutorError):
    """Labeled failures: reported to the caller, never fatal to the session."""
    logger.failure(exc.kind, exc.detail, data={
        "path": request.url.path,
        "status": exc.status_code,
        "retryable": exc.retryable,
    })
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}", error=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": "Internal server error", "retryable": False},
    )


# ==================== Routes ====================

@app.get("/")
async def root():
    return {
        "message": "SOCRATIX - Socratic Reasoning Server",
        "version": "2.0.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "model": Config.OPENAI_MODEL}


@app.post("/api/sessions/{session_id}/init")
async def init_session(session_id: str, body: InitRequest, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    logger.request("POST", f"/api/sessions/{session_id}/init", data={"topic": body.topic})
    result = await orchestrator.init(session_id, body.topic or "")
    logger.success(f"Session {session_id} started on '{result['state']['topic']}'")
    return result


@app.post("/api/sessions/{session_id}/calibrate")
async def calibrate_session(session_id: str, body: CalibrationRequest, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    logger.request("POST", f"/api/sessions/{session_id}/calibrate", data={"responses": len(body.calibration_responses)})
    return await orchestrator.calibrate(session_id, body.calibration_responses)


@app.post("/api/sessions/{session_id}/question/generate")
async def generate_question(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.generate_initial_question(session_id)


@app.post("/api/sessions/{session_id}/answer", response_model=AnswerResponse)
async def submit_answer(session_id: str, body: AnswerRequest, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    start_time = time.time()
    path = f"/api/sessions/{session_id}/answer"
    logger.section("ANSWER SUBMISSION", {
        "session_id": session_id,
        "confidence": body.confidence,
        "answer_length": len(body.answer or ""),
    })

    outcome = await orchestrator.submit_answer(session_id, body.answer or "", body.confidence)

    logger.response(200, path, duration=time.time() - start_time, data={
        "depth": outcome.depth,
        "question_type": outcome.question_type,
        "consistency_score": outcome.consistency_score,
        "contradiction": outcome.contradiction_detected,
        "ready_for_synthesis": outcome.ready_for_synthesis,
    })
    return outcome.to_dict()


@app.post("/api/sessions/{session_id}/scaffold", response_model=ScaffoldResult)
async def request_scaffold(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    scaffold = await orchestrator.request_scaffold(session_id)
    return ScaffoldResult(
        level=scaffold.level,
        level_name=scaffold.level_name,
        message=scaffold.message,
        max_reached=scaffold.max_reached,
    )


@app.post("/api/sessions/{session_id}/advance", response_model=AdvanceResponse)
async def advance_step(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    result = await orchestrator.advance_step(session_id)
    return AdvanceResponse(advanced=result.advanced, current_step=result.current_step, reason=result.reason)


@app.post("/api/sessions/{session_id}/synthesize")
async def request_synthesis(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.request_synthesis(session_id)


@app.post("/api/sessions/{session_id}/evaluate-synthesis")
async def evaluate_synthesis(session_id: str, body: SynthesisMemoRequest, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.evaluate_synthesis(session_id, body.synthesis_memo or "")


@app.post("/api/sessions/{session_id}/conclude")
async def conclude_session(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    result = await orchestrator.conclude(session_id)
    logger.success(f"Session {session_id} concluded", data={"total_questions": result["summary"]["total_questions"]})
    return result


@app.post("/api/sessions/{session_id}/reset")
async def reset_session(session_id: str, body: Optional[ResetRequest] = None, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.reset(session_id, body.topic if body else None)


@app.post("/api/sessions/{session_id}/confused-questions")
async def confused_questions(session_id: str, body: Optional[ConfusedQuestionsRequest] = None, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.generate_confused_questions(session_id, body.count if body else 3)


@app.get("/api/sessions/{session_id}/state")
async def get_state(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)) -> Dict[str, Any]:
    return await orchestrator.get_state(session_id)


@app.get("/api/sessions/{session_id}/thought-process")
async def get_thought_process(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_thought_process(session_id)


@app.get("/api/sessions/{session_id}/assertions")
async def get_assertion_log(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_assertion_log(session_id)


@app.get("/api/sessions/{session_id}/misconceptions")
async def get_misconceptions(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_misconceptions(session_id)


@app.get("/api/sessions/{session_id}/knowledge-gap-map")
async def get_knowledge_gap_map(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_knowledge_gap_map(session_id)


@app.get("/api/sessions/{session_id}/consistency-score")
async def get_consistency_score(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_consistency_report(session_id)


@app.get("/api/sessions/{session_id}/history")
async def get_conversation_history(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_conversation_history(session_id)


@app.get("/api/sessions/{session_id}/knowledge-graph")
async def get_knowledge_graph(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_knowledge_graph(session_id)


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str, orchestrator: SocraticOrchestrator = Depends(get_orchestrator)):
    deleted = await orchestrator.sessions.delete_session(session_id)
    return {"deleted": deleted, "session_id": session_id}


if __name__ == "__main__":
    logger.info(f"🚀 Starting SOCRATIX server on http://{Config.HOST}:{Config.PORT}")
    uvicorn.run("backend.main:app", host=Config.HOST, port=Config.PORT, reload=True)
