"""
sources.py - Feature sources answering count / length-sum queries for a WHERE clause

SQLFeatureSource   - road_survey_segments table in the service database
ArcGISFeatureSource - ArcGIS REST feature layer (`<layer>/query`)
"""
import asyncio
import json
import logging
from typing import Any

import requests
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import REMOTE_QUERY_TIMEOUT
from models.segment_models import RoadSurveySegment
from .errors import RemoteQueryError
from .predicates import DEFAULT_SCHEMA, FieldSchema

logger = logging.getLogger(__name__)


def _where(clause: str):
    # Colons inside quoted region names must not become bind parameters.
    return text(clause.replace(":", r"\:"))


class SQLFeatureSource:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _scalar(self, stmt, where: str):
        try:
            async with self.session_factory() as session:
                r = await session.execute(stmt)
                return r.scalar()
        except SQLAlchemyError as exc:
            raise RemoteQueryError(f"Segment table query failed: {exc}", where) from exc

    async def query_count(self, where: str) -> int:
        stmt = select(func.count()).select_from(RoadSurveySegment).where(_where(where))
        return int(await self._scalar(stmt, where) or 0)

    async def query_length_sum(self, where: str) -> float:
        stmt = select(func.sum(RoadSurveySegment.shape_length)).where(_where(where))
        return float(await self._scalar(stmt, where) or 0.0)

    async def query_features(self, where: str, limit: int = 100) -> list[dict[str, Any]]:
        stmt = (
            select(RoadSurveySegment)
            .where(_where(where))
            .order_by(RoadSurveySegment.object_id)
            .limit(limit)
        )
        try:
            async with self.session_factory() as session:
                r = await session.execute(stmt)
                rows = r.scalars().all()
        except SQLAlchemyError as exc:
            raise RemoteQueryError(f"Segment table query failed: {exc}", where) from exc
        return [row.to_attributes() for row in rows]


class ArcGISFeatureSource:
    """
    Query an ArcGIS feature layer over its REST endpoint.

    requests is blocking, so every call runs in a worker thread to keep the
    event loop free while the five category queries are in flight. Without an
    injected session each call goes through requests.post and its own Session;
    worker threads never share one.
    """

    def __init__(
        self,
        layer_url: str,
        timeout: float = REMOTE_QUERY_TIMEOUT,
        schema: FieldSchema = DEFAULT_SCHEMA,
        session: requests.Session | None = None,
    ):
        self.layer_url = layer_url.rstrip("/")
        self.timeout = timeout
        self.schema = schema
        self.session = session

    def _query(self, params: dict[str, Any]) -> dict[str, Any]:
        where = params.get("where")
        payload = {"f": "json", **params}
        try:
            http = self.session if self.session is not None else requests
            response = http.post(f"{self.layer_url}/query", data=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise RemoteQueryError(f"Feature layer request failed: {exc}", where) from exc
        except ValueError as exc:
            raise RemoteQueryError("Feature layer returned invalid JSON", where) from exc

        if not isinstance(data, dict):
            raise RemoteQueryError("Feature layer returned an unexpected payload", where)

        # ArcGIS reports query errors with HTTP 200 and an `error` object
        if "error" in data:
            error = data["error"] or {}
            raise RemoteQueryError(
                f"Feature layer error {error.get('code')}: {error.get('message', 'unknown error')}",
                where,
            )
        return data

    async def query_count(self, where: str) -> int:
        data = await asyncio.to_thread(self._query, {"where": where, "returnCountOnly": "true"})
        try:
            return int(data["count"])
        except (KeyError, TypeError, ValueError) as exc:
            raise RemoteQueryError("Count missing from feature layer response", where) from exc

    async def query_length_sum(self, where: str) -> float:
        statistics = [{
            "statisticType": "sum",
            "onStatisticField": self.schema.length,
            "outStatisticFieldName": "total_length",
        }]
        data = await asyncio.to_thread(self._query, {
            "where": where,
            "outStatistics": json.dumps(statistics),
            "returnGeometry": "false",
        })
        try:
            features = data.get("features") or []
            if not features:
                return 0.0
            attributes = features[0].get("attributes") or {}
            # some servers upper-case the output statistic name
            for key, value in attributes.items():
                if key.lower() == "total_length":
                    return float(value or 0.0)
        except (AttributeError, TypeError, ValueError) as exc:
            raise RemoteQueryError("Length statistic malformed in feature layer response", where) from exc
        return 0.0

    async def query_features(self, where: str, limit: int = 100) -> list[dict[str, Any]]:
        data = await asyncio.to_thread(self._query, {
            "where": where,
            "outFields": "*",
            "returnGeometry": "false",
            "resultRecordCount": limit,
        })
        try:
            return [feature.get("attributes") or {} for feature in data.get("features") or []]
        except AttributeError as exc:
            raise RemoteQueryError("Features malformed in feature layer response", where) from exc
