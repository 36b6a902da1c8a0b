"""HTTP entry point: LaTeX normalization and MathML conversion over FastAPI."""
from __future__ import annotations

from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.config import settings
from core.logger import init_logging, logger
from services.latex.extract import extract_latex
from services.latex.normalizer import is_display, normalize
from services.mathml.converter import MathMLConverter


class NormalizeRequest(BaseModel):
    latex: str = ""


class MathMLRequest(BaseModel):
    latex: str = ""
    display: Optional[bool] = None
    normalize: bool = True


class ConvertRequest(BaseModel):
    """Raw recognizer response text, possibly fenced or $$-delimited."""

    content: str = ""
    display: Optional[bool] = None


def _check_size(text: str) -> None:
    if len(text) > settings.max_latex_chars:
        raise HTTPException(
            status_code=413,
            detail=f"LaTeX too large: {len(text)} chars (max {settings.max_latex_chars})",
        )


def create_app(converter: Optional[MathMLConverter] = None) -> FastAPI:
    """Create FastAPI app with health, normalize and MathML routes."""
    app = FastAPI(title="Formula Normalizer", version="0.1.0")
    latex_mathml = converter or MathMLConverter()

    def render(latex: str, display: Optional[bool]) -> dict[str, Any]:
        mode = display if display is not None else is_display(latex)
        return {"latex": latex, "display": mode, "mathml": latex_mathml.convert(latex, mode)}

    @app.on_event("startup")
    async def startup_event() -> None:
        init_logging()
        logger.info("Formula normalizer service started")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/normalize")
    async def normalize_latex(payload: NormalizeRequest) -> dict[str, Any]:
        """Rewrite recognizer LaTeX into canonical form."""
        _check_size(payload.latex)
        normalized = normalize(payload.latex)
        return {
            "latex": payload.latex,
            "normalized": normalized,
            "display": is_display(normalized),
        }

    @app.post("/api/mathml")
    async def latex_to_mathml(payload: MathMLRequest) -> dict[str, Any]:
        """Convert LaTeX (normalized first unless disabled) to MathML."""
        _check_size(payload.latex)
        latex = normalize(payload.latex) if payload.normalize else payload.latex
        return render(latex, payload.display)

    @app.post("/api/convert")
    async def convert_response(payload: ConvertRequest) -> Any:
        """Extract, normalize and convert a recognizer response in one call."""
        _check_size(payload.content)
        try:
            latex = normalize(extract_latex(payload.content))
            result = render(latex, payload.display)
            result["raw"] = payload.content
            return result
        except Exception as exc:  # noqa: BLE001
            logger.exception("Conversion failed: %s", exc)
            return JSONResponse(
                {"status": "error", "message": str(exc)},
                status_code=500,
            )

    return app


def main() -> None:
    """Entry point for CLI; starts the API server."""
    init_logging()
    logger.info("Starting FastAPI server at %s:%s", settings.host, settings.port)
    uvicorn.run(create_app(), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
