from contextlib import asynccontextmanager
from typing import (
    Any,
    Dict,
)
from fastapi import (
    FastAPI,
    Request,
)
from fastapi.middleware.cors import CORSMiddleware
from app.api.v1.chat import router as chat_router
from app.api.v1.threads import router as threads_router
from app.config.llm import LLMSettings
from app.config.mongodb import MongoDB
from app.utils.llm_client import LLMClient
from app.utils.logging_config import init_logging

init_logging("freechat-backend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    mongodb = MongoDB()
    await mongodb.connect()
    llm_client = LLMClient(LLMSettings.from_env())
    app.state.mongodb = mongodb
    app.state.llm_client = llm_client
    yield
    await llm_client.close()
    await mongodb.close()

app = FastAPI(
    description="FreeChat conversation backend",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Thread-Id"],
)

# Include API routers
app.include_router(threads_router, prefix="/api/v1/threads")
app.include_router(chat_router, prefix="/api/v1/chat")


@app.get("/")
async def root(request: Request):
    """Root endpoint returning basic API information."""
    return {"name": "FreeChat Backend", "version": "0.1.0", "status": "healthy"}


@app.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """Health check endpoint returning basic API information."""
    return {"status": "healthy"}
