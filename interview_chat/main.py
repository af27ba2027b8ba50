from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from interview_chat.config import settings
from interview_chat.utils.logging import configure_logging
from interview_chat.routers.chat import router as chat_router
from interview_chat.routers.ws import router as ws_router
from interview_chat.services.orchestrator import ConversationOrchestrator, build_orchestrator
from interview_chat.services.realtime import ConnectionHub
from interview_chat.utils.audit import auditor


def create_app(orchestrator: ConversationOrchestrator | None = None) -> FastAPI:
	app = FastAPI(title="Interview Chat Backend", version="0.1.0")
	app.state.orchestrator = orchestrator or build_orchestrator()
	app.state.hub = ConnectionHub()

	# CORS
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_allow_origins,
		# Browsers reject credentials on wildcard origins
		allow_credentials=False if settings.cors_allow_origins == ["*"] else True,
		allow_methods=["*"],
		allow_headers=["*"],
		max_age=3600,
	)

	@app.exception_handler(RequestValidationError)
	async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
		details = [
			{"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg", "")}
			for err in exc.errors()
		]
		return JSONResponse(status_code=400, content={"error": "Invalid request data", "details": details})

	@app.get("/health")
	async def health() -> JSONResponse:
		return JSONResponse({
			"status": "ok",
			"version": app.version,
			"completion": {"enabled": app.state.orchestrator.completion_client.enabled},
		})

	# Routers
	app.include_router(chat_router, prefix="/api", tags=["chat"])
	app.include_router(ws_router, tags=["realtime"])
	return app


configure_logging(settings.log_level)
auditor.configure(settings.analytics_path)
app = create_app()
