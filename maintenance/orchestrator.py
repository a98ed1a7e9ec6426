"""
orchestrator.py - Pick the remote or local aggregation path for a calculation run

Remote source first; on RemoteQueryError fall back to the local segments;
with neither, an all-zero result. The outcome status tells an empty network
apart from a failed refresh.
"""
import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Sequence

from pydantic import BaseModel, Field

from config import LENGTH_MODE, RECALC_DEBOUNCE_MS
from .aggregation import aggregate
from .errors import RemoteQueryError
from .predicates import DEFAULT_SCHEMA, FieldSchema
from .remote import FeatureSource, LengthMode, aggregate_remote
from .schemas import AggregationResult, CalculationInputs, RoadSegment

logger = logging.getLogger(__name__)


class CalculationStatus(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"
    LOCAL_FALLBACK = "local_fallback"  # remote failed, local segments used
    FAILED = "failed"                  # remote failed, nothing to fall back on
    EMPTY = "empty"                    # no data source configured


class CalculationOutcome(BaseModel):
    status: CalculationStatus
    result: AggregationResult
    inputs: CalculationInputs
    generation: int
    error: str | None = None
    superseded: bool = False
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CalculationOrchestrator:
    """
    Runs calculations for explicit input snapshots.

    Every run takes a generation ticket when it starts. Only a run that is
    still the newest when it finishes becomes `latest`; older runs that
    resolve afterwards are returned to their caller flagged as superseded.
    """

    def __init__(
        self,
        remote: FeatureSource | None = None,
        segments: Sequence[RoadSegment] | None = None,
        length_mode: LengthMode | str = LENGTH_MODE,
        schema: FieldSchema = DEFAULT_SCHEMA,
        debounce_ms: int = RECALC_DEBOUNCE_MS,
    ):
        self.remote = remote
        self.segments = list(segments) if segments is not None else None
        self.length_mode = LengthMode(length_mode)
        self.schema = schema
        self.debounce_ms = debounce_ms
        self._generation = 0
        self._scheduled = 0
        self._latest: CalculationOutcome | None = None

    @property
    def latest(self) -> CalculationOutcome | None:
        return self._latest

    async def run_calculations(self, inputs: CalculationInputs | None = None) -> CalculationOutcome:
        inputs = inputs or CalculationInputs()
        self._generation += 1
        ticket = self._generation

        outcome = await self._calculate(inputs, ticket)

        if ticket != self._generation:
            logger.info("Discarding superseded calculation run %d (newest is %d)", ticket, self._generation)
            return outcome.model_copy(update={"superseded": True})
        self._latest = outcome
        return outcome

    def schedule(self, inputs: CalculationInputs) -> "asyncio.Task[CalculationOutcome | None]":
        """
        Debounced trigger: only the last snapshot scheduled within the
        window is calculated; earlier tasks resolve to None.
        """
        self._scheduled += 1
        token = self._scheduled
        return asyncio.get_running_loop().create_task(self._debounced(inputs, token))

    async def _debounced(self, inputs: CalculationInputs, token: int) -> CalculationOutcome | None:
        await asyncio.sleep(self.debounce_ms / 1000)
        if token != self._scheduled:
            return None
        return await self.run_calculations(inputs)

    async def _calculate(self, inputs: CalculationInputs, ticket: int) -> CalculationOutcome:
        def outcome(status, result, error=None):
            return CalculationOutcome(
                status=status, result=result, inputs=inputs, generation=ticket, error=error,
            )

        if self.remote is not None:
            try:
                result = await aggregate_remote(
                    self.remote,
                    inputs.parameters,
                    inputs.costs,
                    inputs.region,
                    self.length_mode,
                    self.schema,
                )
            except RemoteQueryError as exc:
                if self.segments is not None:
                    logger.warning("Remote aggregation failed, using local segments: %s", exc)
                    return outcome(CalculationStatus.LOCAL_FALLBACK, self._aggregate_local(inputs), str(exc))
                logger.error("Remote aggregation failed and no local segments are loaded: %s", exc)
                return outcome(CalculationStatus.FAILED, AggregationResult.zero(), str(exc))
            logger.info(
                "Calculation %d (remote) | %.1f km | €%.0f",
                ticket, result.total_length_km, result.total_cost,
            )
            return outcome(CalculationStatus.REMOTE, result)

        if self.segments is not None:
            result = self._aggregate_local(inputs)
            logger.info(
                "Calculation %d (local) | %.1f km | €%.0f",
                ticket, result.total_length_km, result.total_cost,
            )
            return outcome(CalculationStatus.LOCAL, result)

        return outcome(CalculationStatus.EMPTY, AggregationResult.zero())

    def _aggregate_local(self, inputs: CalculationInputs) -> AggregationResult:
        return aggregate(self.segments or [], inputs.parameters, inputs.costs, inputs.region)
