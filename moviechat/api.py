from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from moviechat.chat_service import INVALID_MESSAGE_ERROR, ChatService
from moviechat.config import Settings
from moviechat.db_init import create_db_engine, ensure_database_initialized
from moviechat.errors import MovieChatError
from moviechat.llm_service import ChatModelClient
from moviechat.query_executor import QueryExecutor
from moviechat.schema_context import load_schema_context
from moviechat.schemas import ChatRequest, ChatResponse, HealthResponse, SchemaResponse


APP_VERSION = "1.0.0"


# Engine and schema context are built once here and disposed on shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    schema_context = load_schema_context(settings.schema_context_path)
    engine = create_db_engine(settings)
    await asyncio.to_thread(ensure_database_initialized, engine, schema_context)

    app.state.chat_service = ChatService(
        model=ChatModelClient(settings),
        executor=QueryExecutor(engine),
        schema_context=schema_context,
        debug=settings.is_development,
    )
    yield
    engine.dispose()


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


service_dep = Annotated[ChatService, Depends(get_chat_service)]

router = APIRouter(prefix="/api", tags=["Chat"])


# Plain def handlers run in the worker thread pool
@router.post("/chat")
def chat(service: service_dep, payload: ChatRequest | None = None):
    message = payload.message if payload else None
    status_code, envelope = service.respond(message)
    return JSONResponse(status_code=status_code, content=envelope.to_payload())


@router.get("/schema", response_model=SchemaResponse, response_model_by_alias=True)
def get_schema(service: service_dep):
    return service.get_schema()


@router.get("/health", response_model=HealthResponse)
def health():
    return ChatService.health()


async def movie_chat_error_handler(request: Request, exc: MovieChatError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


# Bodies that are not a JSON object never reach the service
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    envelope = ChatResponse(success=False, error=INVALID_MESSAGE_ERROR)
    return JSONResponse(status_code=400, content=envelope.to_payload())


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.load(env_file=".env")
    app = FastAPI(title="Movie Chat SQL API", version=APP_VERSION, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(MovieChatError, movie_chat_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "message": "Movie Chat SQL API",
            "version": APP_VERSION,
            "endpoints": {
                "chat": "POST /api/chat",
                "schema": "GET /api/schema",
                "health": "GET /api/health",
            },
        }

    return app


app = create_app()
