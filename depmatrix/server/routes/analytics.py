"""Submission analytics endpoints — per-column averages and timeline."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

from depmatrix.analysis.timeline import column_averages, column_timeline
from depmatrix.config import DepMatrixSettings
from depmatrix.models import HistoryEntry, Matrix
from depmatrix.snapshots import parse_snapshot, submissions_from_history

router = APIRouter(prefix="/api/analytics")


class AnalyticsRequest(BaseModel):
    matrix: Matrix
    history: list[HistoryEntry] = []


class ColumnAverageOut(BaseModel):
    id: int
    name: str
    average: float


class ColumnAveragesResponse(BaseModel):
    averages: list[ColumnAverageOut]
    message: str = ""


class ColumnSeriesOut(BaseModel):
    id: int
    name: str
    counts: list[int]


class ColumnTimelineResponse(BaseModel):
    labels: list[str]
    series: list[ColumnSeriesOut]


def _get_settings(request: Request) -> DepMatrixSettings:
    return request.app.state.settings


@router.post("/column-averages", response_model=ColumnAveragesResponse)
def get_column_averages(body: AnalyticsRequest) -> ColumnAveragesResponse:
    """Average dependencies per column over every stored snapshot.

    Any history entry with a snapshot counts, whatever its action.
    """
    snapshots = [
        parse_snapshot(e.matrix_snapshot) for e in body.history if e.matrix_snapshot is not None
    ]
    if not snapshots:
        return ColumnAveragesResponse(
            averages=[], message="No history data available for this matrix"
        )
    return ColumnAveragesResponse(
        averages=[
            ColumnAverageOut(id=a.id, name=a.name, average=round(a.average, 4))
            for a in column_averages(body.matrix, snapshots)
        ]
    )


@router.post("/column-timeline", response_model=ColumnTimelineResponse)
def get_column_timeline(body: AnalyticsRequest, request: Request) -> ColumnTimelineResponse:
    """Dependencies per column for each user submission, oldest first."""
    settings = _get_settings(request)
    submissions = submissions_from_history(
        body.history,
        action=settings.submission_action,
        exclude_usernames=settings.excluded_usernames,
    )
    timeline = column_timeline(body.matrix, submissions)
    return ColumnTimelineResponse(
        labels=timeline.labels,
        series=[ColumnSeriesOut(id=s.id, name=s.name, counts=s.counts) for s in timeline.series],
    )
