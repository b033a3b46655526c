from fastapi import APIRouter
from cube_api.schemas.api_schemas import AssistantRequest, AssistantResponse
from cube_api.application.assistant import respond

router = APIRouter()

@router.post("/assistant", response_model=AssistantResponse)
async def ask_assistant(request: AssistantRequest):
    """
    Canned guidance for building and debugging sketches.
    """
    return AssistantResponse(reply=respond(request.message))
