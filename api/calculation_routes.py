"""
calculation_routes.py - Run maintenance calculations and read the latest outcome
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.dependencies import get_orchestrator
from maintenance.orchestrator import CalculationOrchestrator, CalculationOutcome
from maintenance.schemas import CalculationInputs, CostInputs, MaintenanceParameters

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Calculations"])


class DefaultsResponse(BaseModel):
    parameters: MaintenanceParameters = Field(default_factory=MaintenanceParameters)
    costs: CostInputs = Field(default_factory=CostInputs)


@router.get("/parameters/defaults", response_model=DefaultsResponse)
async def get_defaults():
    """Default thresholds and €/m² rates."""
    return DefaultsResponse()


@router.post("/calculations", response_model=CalculationOutcome)
async def run_calculations(
    inputs: CalculationInputs,
    orchestrator: CalculationOrchestrator = Depends(get_orchestrator),
):
    """
    Classify the network with the given thresholds and aggregate length/cost
    per category. Omitted fields use the defaults.
    """
    outcome = await orchestrator.run_calculations(inputs)
    if outcome.error:
        logger.warning("Calculation %d finished with status=%s", outcome.generation, outcome.status.value)
    return outcome


@router.get("/calculations/latest", response_model=CalculationOutcome)
async def latest_calculation(
    orchestrator: CalculationOrchestrator = Depends(get_orchestrator),
):
    if orchestrator.latest is None:
        raise HTTPException(status_code=404, detail="No calculation has run yet")
    return orchestrator.latest
