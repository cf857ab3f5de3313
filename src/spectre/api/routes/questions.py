"""Requirements question session endpoints."""

from fastapi import APIRouter, status

from spectre.api.dependencies import OrchestratorDep
from spectre.api.models import (
    AnswerSubmit,
    APIResponse,
    NextQuestionResponse,
    ProjectResponse,
    QuestionSessionResponse,
    project_to_response,
)

router = APIRouter(tags=["questions"])


@router.post(
    "/projects/{project_id}/questions",
    response_model=APIResponse[QuestionSessionResponse],
    status_code=status.HTTP_201_CREATED,
)
def start_session(
    project_id: str, orchestrator: OrchestratorDep
) -> APIResponse[QuestionSessionResponse]:
    """Start a question session for a project."""
    session = orchestrator.start_question_session(project_id)
    return APIResponse(data=QuestionSessionResponse.model_validate(session))


@router.get("/questions/{session_id}/next", response_model=APIResponse[NextQuestionResponse])
def next_question(
    session_id: str, orchestrator: OrchestratorDep
) -> APIResponse[NextQuestionResponse]:
    """Get the next unanswered question."""
    question = orchestrator.next_question(session_id)
    return APIResponse(
        data=NextQuestionResponse(session_id=session_id, question=question, done=question is None)
    )


@router.post(
    "/questions/{session_id}/answers", response_model=APIResponse[QuestionSessionResponse]
)
def submit_answer(
    session_id: str, body: AnswerSubmit, orchestrator: OrchestratorDep
) -> APIResponse[QuestionSessionResponse]:
    """Answer the session's current question."""
    session = orchestrator.submit_answer(session_id, body.answer)
    return APIResponse(data=QuestionSessionResponse.model_validate(session))


@router.post("/questions/{session_id}/complete", response_model=APIResponse[ProjectResponse])
def complete_session(
    session_id: str, orchestrator: OrchestratorDep
) -> APIResponse[ProjectResponse]:
    """Complete a session and merge its answers into the project's requirements."""
    project = orchestrator.complete_question_session(session_id)
    return APIResponse(data=project_to_response(project), message="Answers saved")
