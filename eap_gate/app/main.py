"""FastAPI application exposing EAP quality gate evaluation."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from pydantic import BaseModel

from eap_gate import __version__
from eap_gate.app.config import get_settings
from eap_gate.orchestrator import EvaluationEngine
from eap_gate.quality import GateContext, ScoringConfig, Thresholds, default_gates
from eap_gate.reporting import build_json_report, exit_code_for

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    logger.info("Starting EAP quality gate API")
    yield
    logger.info("Shutting down EAP quality gate API")


class EvaluationRequest(BaseModel):
    """Request body for an evaluation run."""
    eap_version: str = "unknown"
    trigger_build: str = "unknown"
    branch: str = "main"
    environment: str = "production"
    parameters: dict[str, str] = {}
    thresholds: Optional[Thresholds] = None
    scoring: Optional[ScoringConfig] = None


app = FastAPI(
    title="EAP Quality Gate API",
    description="Release verdicts for EAP builds from validation pipeline results",
    version=__version__,
    lifespan=lifespan
)

engine = EvaluationEngine()


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "EAP Quality Gate API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/evaluate")
async def evaluate(request: EvaluationRequest):
    """Evaluate the default gates and return the JSON report document."""
    thresholds = request.thresholds or settings.thresholds()
    context = GateContext(
        eap_version=request.eap_version,
        trigger_build=request.trigger_build,
        branch=request.branch,
        environment=request.environment,
        thresholds=thresholds,
        scoring_config=request.scoring or settings.scoring_config(),
        additional_parameters=request.parameters,
    )
    logger.info(f"Evaluating EAP {context.eap_version} for build {context.trigger_build}")

    report = await engine.evaluate_all_async(default_gates(), context)

    document = build_json_report(report, thresholds)
    document["exitCode"] = exit_code_for(report)
    return document


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
