"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 및 라우터 등록.

FastAPI application entry point — Middleware and router registration.
Configures logging, Axiom request logging, CORS, the health check and the
versioned API router.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from calcapp.config import settings
from calcapp.middleware.axiom_logging import AxiomLoggingMiddleware
from calcapp.api.v1 import api_router

# 영속성 리스너 등록 — Registers the before-flush calculation stamping
import calcapp.listeners  # noqa: F401

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom 요청 로깅 — CORS보다 먼저 등록 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 — Health check endpoint for load balancers and monitoring."""
    return {"status": "ok"}


app.include_router(api_router, prefix="/api/v1")
