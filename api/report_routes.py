"""
report_routes.py - Report payloads for the PDF and CSV exports
"""
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from api.dependencies import get_orchestrator
from maintenance.orchestrator import CalculationOrchestrator
from maintenance.report import build_report, render_csv
from maintenance.schemas import CalculationInputs

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/summary")
async def report_summary(
    inputs: CalculationInputs,
    orchestrator: CalculationOrchestrator = Depends(get_orchestrator),
):
    outcome = await orchestrator.run_calculations(inputs)
    report = build_report(outcome.result, inputs)
    report["status"] = outcome.status.value
    report["error"] = outcome.error
    return report


@router.post("/csv", response_class=PlainTextResponse)
async def report_csv(
    inputs: CalculationInputs,
    orchestrator: CalculationOrchestrator = Depends(get_orchestrator),
):
    outcome = await orchestrator.run_calculations(inputs)
    return PlainTextResponse(
        render_csv(build_report(outcome.result, inputs)),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="maintenance_report.csv"'},
    )
