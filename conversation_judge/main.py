from __future__ import annotations

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .analysis_service import ConversationAnalysisService
from .config import describe_env_config
from .diagnostics import describe_error
from .errors import (
    AnalysisConfigError,
    AnalysisError,
    AnalysisInputError,
    ProviderRateLimitError,
)

analysis_service = ConversationAnalysisService()

app = FastAPI(title="Conversation Judge", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class TextAnalysisBody(BaseModel):
    text: str


def _http_error(exc: AnalysisError) -> HTTPException:
    detail = exc.diagnostic or describe_error(exc)
    if isinstance(exc, AnalysisInputError):
        return HTTPException(status_code=400, detail=detail)
    if isinstance(exc, AnalysisConfigError):
        return HTTPException(status_code=500, detail=detail)
    if isinstance(exc, ProviderRateLimitError):
        return HTTPException(status_code=429, detail=detail)
    return HTTPException(status_code=502, detail=detail)


@app.get("/api/analysis/provider")
async def get_provider():
    return describe_env_config()


@app.post("/api/analysis/text")
async def analyze_text(body: TextAnalysisBody):
    try:
        result = await analysis_service.analyze_text(body.text)
    except AnalysisError as exc:
        raise _http_error(exc) from exc
    return result.to_dict()


@app.post("/api/analysis/screenshot")
async def analyze_screenshot(file: UploadFile = File(...)):
    image_bytes = await file.read()
    try:
        result = await analysis_service.analyze_screenshot(image_bytes, file.content_type)
    except AnalysisError as exc:
        raise _http_error(exc) from exc
    return result.to_dict()


if __name__ == "__main__":
    import logging

    import uvicorn

    logging.basicConfig(level=logging.INFO)

    uvicorn.run("conversation_judge.main:app", host="0.0.0.0", port=8000, reload=True)
