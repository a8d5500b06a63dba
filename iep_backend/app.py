"""FastAPI application for the IEP extraction backend."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers.iep import router as iep_router
from .utils.logging import configure_logging

configure_logging()

app = FastAPI(title="SimpleIEP Extraction", version="1.0.0")

app.include_router(iep_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
