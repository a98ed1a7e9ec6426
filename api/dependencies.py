"""
dependencies.py - FastAPI dependency for the engine built at startup
"""
from fastapi import HTTPException, Request

from maintenance.orchestrator import CalculationOrchestrator


def get_orchestrator(request: Request) -> CalculationOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Calculation engine is not ready")
    return orchestrator
