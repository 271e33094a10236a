from __future__ import annotations  # FastAPI server exposing interview sessions

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router


app = FastAPI(title="Interview Orchestration API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)


@app.get("/health")
def health() -> dict:  # Liveness probe
    return {"status": "ok"}
