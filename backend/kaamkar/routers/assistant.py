from fastapi import APIRouter, Depends

from .. import deps
from ..auth import current_user_id
from ..schemas import AssistantRequest, AssistantResponse, NoteSuggestionResponse
from ..services.assistant import Assistant

router = APIRouter(tags=["assistant"])


@router.post("/assistant", response_model=AssistantResponse)
def run_assistant(
    payload: AssistantRequest,
    user_id: str = Depends(current_user_id),
    assistant: Assistant = Depends(deps.get_assistant),
) -> AssistantResponse:
    return AssistantResponse(result=assistant.run_action(payload.action.value, payload.data))


@router.post("/notes/{note_id}/suggestions", response_model=NoteSuggestionResponse)
def suggest_note_improvements(
    note_id: str,
    user_id: str = Depends(current_user_id),
    assistant: Assistant = Depends(deps.get_assistant),
) -> NoteSuggestionResponse:
    note = deps.notes.get(user_id, note_id)
    return NoteSuggestionResponse(noteId=note.id, suggestions=assistant.suggest_note_improvements(note.title, note.content))
