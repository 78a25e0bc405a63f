"""Simulation API endpoints."""

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from api.limiter import limiter
from api.schemas import ReportRequest, ReportResponse, SimulationRequest, SimulationResponse
from casino.statistics.simulation import SimulationResult, SimulationService, generate_report
from config import config

router = APIRouter()

SIMULATION_LIMIT = f"{max(config.rate_limit.requests_per_minute // 6, 1)}/minute"


def _to_response(result: SimulationResult) -> SimulationResponse:
    return SimulationResponse(**result.to_dict())


@router.post("/run")
@limiter.limit(SIMULATION_LIMIT)
async def run_simulation(request: Request, body: SimulationRequest) -> SimulationResponse:
    """Run a batch on an isolated random source, off the event loop."""
    service = SimulationService(seed=body.seed)
    try:
        result = await run_in_threadpool(
            service.run,
            body.kind,
            body.num_rounds,
            body.selection,
            body.bet_amount,
        )
    except (ValueError, KeyError, IndexError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None
    return _to_response(result)


@router.post("/report")
@limiter.limit(SIMULATION_LIMIT)
async def simulation_report(request: Request, body: ReportRequest) -> ReportResponse:
    """Simulate every game with its default selection and render a summary."""
    service = SimulationService(seed=body.seed)
    results = await run_in_threadpool(service.run_all, body.num_rounds)
    return ReportResponse(
        report=generate_report(results),
        results=[_to_response(r) for r in results],
    )
