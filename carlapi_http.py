#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

import carlapi_core
from carlapi_assist import ApiAssist

# --- Config ---------------------------------------------------------------

CARLAPI_JSON = Path(os.getenv("CARLAPI_JSON", "utils/carla_api.json")).resolve()
API_NAME = os.getenv("CARLAPI_NAME", "CARLA")
LANGUAGE_ID = os.getenv("CARLAPI_LANGUAGE", "python")
LOG_LEVEL = os.getenv("CARLAPI_LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://localhost").split(",")
    if o.strip()
]
API_KEY = os.getenv("CARLAPI_KEY", "")

OPEN_DOCS = os.getenv("OPEN_DOCS", "0") == "1"
DOCS_URL = "/docs" if OPEN_DOCS else None
REDOC_URL = "/redoc" if OPEN_DOCS else None
OPENAPI_URL = "/openapi.json" if OPEN_DOCS else None

OPEN_PATHS = {"/health"}
# Se quiser docs públicos sem chave, inclua DOCS_PUBLIC=1
DOCS_PUBLIC = os.getenv("DOCS_PUBLIC", "0") == "1"
if OPEN_DOCS and DOCS_PUBLIC:
    OPEN_PATHS.update({p for p in [DOCS_URL, REDOC_URL, OPENAPI_URL] if p})

COMPLETION_TRIGGERS = ["."]
SIGNATURE_TRIGGERS = ["(", ","]

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="[carlapi] %(levelname)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
log = logging.getLogger("carlapi")

# --- App ------------------------------------------------------------------

app = FastAPI(
    title="carlapi_http",
    version="1.0.0",
    docs_url=DOCS_URL,
    redoc_url=REDOC_URL,
    openapi_url=OPENAPI_URL,
)

# wildcard "*" não deve combinar com credentials=True
allow_credentials = True
if any(o == "*" for o in ALLOWED_ORIGINS):
    allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS", "HEAD"],
    allow_headers=["authorization", "x-api-key", "content-type", "accept", "origin"],
)

# --- Estado ---------------------------------------------------------------

# carregado uma única vez; falha fica registrada e desliga os providers
assist = ApiAssist.from_path(CARLAPI_JSON, api_name=API_NAME)

# --- Auth middleware ------------------------------------------------------

@app.middleware("http")
async def api_key_guard(request: Request, call_next):
    # Preflight/HEAD passam sem chave
    if request.method in ("OPTIONS", "HEAD"):
        return await call_next(request)

    if not API_KEY:
        return await call_next(request)

    if request.url.path in OPEN_PATHS:
        return await call_next(request)

    incoming = request.headers.get("x-api-key")
    if incoming is None:
        auth = request.headers.get("authorization")
        if auth and auth.lower().startswith("bearer "):
            incoming = auth[7:]

    incoming = (incoming or "").strip()
    expected = (API_KEY or "").strip()

    if not incoming or incoming != expected:
        return JSONResponse(
            status_code=401,
            headers={"WWW-Authenticate": "Bearer, X-Api-Key"},
            content={"detail": "invalid or missing API key"},
        )

    return await call_next(request)

# --- Modelos --------------------------------------------------------------

class DocumentPosition(BaseModel):
    text: str
    line: int = Field(..., ge=0)
    character: int = Field(..., ge=0)

# --- Rotas ----------------------------------------------------------------

@app.get("/health")
def health():
    body = {
        "status": "ok" if assist.ready else "error",
        "message": f"{API_NAME} API Ready" if assist.ready else f"Failed to load {API_NAME} API definition file",
        "counts": assist.info(),
        "catalog": str(CARLAPI_JSON),
        "port": int(os.getenv("PORT", "3737")),
        "allowed_origins": ALLOWED_ORIGINS,
        "open_docs": OPEN_DOCS,
        "docs_public": DOCS_PUBLIC,
        "allow_credentials": allow_credentials,
    }
    if assist.error is not None:
        body["error"] = str(assist.error)
    return body

@app.get("/info")
def get_info():
    return assist.info()

@app.get("/capabilities")
def capabilities():
    enabled = assist.ready
    return {
        "language": LANGUAGE_ID,
        "completionProvider": {"triggerCharacters": COMPLETION_TRIGGERS} if enabled else None,
        "signatureHelpProvider": {"triggerCharacters": SIGNATURE_TRIGGERS} if enabled else None,
        "hoverProvider": enabled,
    }

@app.get("/class/{name}")
def get_class(name: str):
    c = assist.catalog.get(name) if assist.catalog is not None else None
    if c is None:
        raise HTTPException(status_code=404, detail="classe não encontrada")
    return c.to_dict()

@app.get("/signature/parse")
def signature_parse(signature: str = Query(..., description="assinatura crua, ex. spawn_actor(self, blueprint)")):
    return [p.to_dict() for p in carlapi_core.parse_signature(signature)]

@app.post("/completion")
def completion(pos: DocumentPosition):
    return assist.complete(pos.text, pos.line, pos.character)

@app.post("/signature-help")
def signature_help(pos: DocumentPosition):
    return assist.signature_help(pos.text, pos.line, pos.character)

@app.post("/hover")
def hover(pos: DocumentPosition):
    return assist.hover(pos.text, pos.line, pos.character)

# --- Main -----------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "carlapi_http:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3737")),
        reload=False,
    )
