from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form
from fastapi.responses import JSONResponse
import logging
import time
import uuid

from interview_chat.dependencies import get_hub, get_orchestrator
from interview_chat.schemas import ChatRequest, ChatResponse, ContextRequest
from interview_chat.services.completion_client import CompletionServiceError
from interview_chat.services.orchestrator import ConversationOrchestrator
from interview_chat.services.realtime import ConnectionHub
from interview_chat.utils.audit import auditor
from interview_chat.utils.security import verify_api_key
from interview_chat.utils.text_extract import decode_upload


logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_key)])

CHAT_FAILED = "Failed to process chat message"


@router.post("/session")
async def create_session():
	# Sessions are created lazily on first write; this just hands out a fresh id
	return {"sessionId": str(uuid.uuid4())}


@router.post("/chat", response_model=ChatResponse)
async def chat(
	payload: ChatRequest,
	orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
	hub: ConnectionHub = Depends(get_hub),
):
	session_id = payload.session_id
	streaming = hub.is_connected(session_id)

	on_token = None
	if streaming:
		await hub.publish(session_id, {
			"type": "stream_start",
			"messageId": str(int(time.time() * 1000)),
		})

		async def on_token(chunk: str) -> None:
			await hub.publish(session_id, {"type": "stream_chunk", "content": chunk})

	try:
		result = await orchestrator.respond(session_id, payload.message, payload.is_voice, on_token=on_token)
	except CompletionServiceError:
		logger.exception("Chat error for session %s", session_id)
		if streaming:
			await hub.publish(session_id, {"type": "error", "error": CHAT_FAILED})
		return JSONResponse(status_code=500, content={"error": CHAT_FAILED})

	if streaming:
		await hub.publish(session_id, {"type": "stream_end", "fullResponse": result.raw_text})

	await auditor.log({
		"type": "chat",
		"session_id": session_id,
		"question": payload.message,
		"answer": result.raw_text,
		"question_type": result.classification.type,
		"follow_up": result.follow_up.is_follow_up,
	})

	return ChatResponse(
		success=True,
		response=result.raw_text,
		streaming=streaming,
		structured=result.structured_response.to_dict(),
		analysis={
			"classification": result.classification.to_dict(),
			"followUp": result.follow_up.to_dict(),
		},
	)


@router.post("/context")
async def save_context(
	payload: ContextRequest,
	orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
	await orchestrator.set_context(payload.session_id, payload.content)
	await auditor.log({
		"type": "context",
		"session_id": payload.session_id,
		"characters": len(payload.content),
	})
	return {"success": True, "message": "Context saved successfully"}


@router.post("/context/upload")
async def upload_context(
	file: UploadFile = File(...),
	session_id: str = Form(..., alias="sessionId"),
	orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
	data = await file.read()
	text = decode_upload(file.filename or "", file.content_type or "", data)
	if not text.strip():
		raise HTTPException(status_code=400, detail="Uploaded file appears empty.")

	await orchestrator.set_context(session_id, text.strip())
	await auditor.log({
		"type": "context_upload",
		"session_id": session_id,
		"filename": file.filename,
		"bytes": len(data),
	})
	return {"success": True, "message": "Context saved successfully", "characters": len(text.strip())}


@router.get("/context/{session_id}")
async def get_context(session_id: str, orchestrator: ConversationOrchestrator = Depends(get_orchestrator)):
	context = await orchestrator.get_context(session_id)
	return {"context": context, "hasContext": bool(context)}


@router.get("/memory/{session_id}")
async def memory_status(session_id: str, orchestrator: ConversationOrchestrator = Depends(get_orchestrator)):
	status = await orchestrator.memory_status(session_id)
	return status.to_dict()


@router.get("/messages/{session_id}")
async def get_messages(session_id: str, orchestrator: ConversationOrchestrator = Depends(get_orchestrator)):
	turns = await orchestrator.history(session_id)
	return {"messages": [t.to_dict() for t in turns]}


@router.delete("/session/{session_id}")
async def clear_session(session_id: str, orchestrator: ConversationOrchestrator = Depends(get_orchestrator)):
	await orchestrator.clear_session(session_id)
	return {"success": True, "message": "Session cleared successfully"}
