"""
Read-only aggregates over the analysis history
"""

import time
from datetime import date, datetime, timedelta
from typing import Any, Optional

import structlog
from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError

from ..database import AnalysisHistory, Database
from ..models.history import (
    AnalysisTypeCount,
    CountryCount,
    DailyActivity,
    StatsResponse
)
from ..utils.exceptions import DatabaseError
from ..utils.logging import log_performance_event

TOP_COUNTRIES = 10
RECENT_ACTIVITY_DAYS = 30


def round_half_up(value: Optional[Any]) -> int:
    """Round a non-negative aggregate, treating NULL as 0"""
    if value is None:
        return 0
    return int(float(value) + 0.5)


def _format_day(value: Any) -> str:
    # SQLite returns 'YYYY-MM-DD' strings, PostgreSQL returns date objects
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)


class StatsAggregator:
    """
    Dashboard statistics
    """

    def __init__(self, database: Database):
        self.database = database
        self.logger = structlog.get_logger("service.stats_aggregator")

    async def get_stats(self) -> StatsResponse:
        """
        Compute all statistics

        Every numeric aggregate is 0 and every distribution is empty when
        the table has no rows.
        """
        table = AnalysisHistory
        count = func.count(table.id).label("analyses")

        # Group and order by label: the JSON path must be rendered only once
        country_query = (
            select(table.location["country"].as_string().label("country"), count)
            .group_by("country")
            .order_by(desc("analyses"), "country")
            .limit(TOP_COUNTRIES)
        )

        type_query = (
            select(table.analysis_type, count)
            .group_by(table.analysis_type)
            .order_by(desc("analyses"), table.analysis_type)
        )

        cutoff = datetime.utcnow() - timedelta(days=RECENT_ACTIVITY_DAYS)
        activity_query = (
            select(func.date(table.created_at).label("activity_date"), count)
            .where(table.created_at >= cutoff)
            .group_by("activity_date")
            .order_by(desc("activity_date"))
            .limit(RECENT_ACTIVITY_DAYS)
        )

        start_time = time.perf_counter()

        try:
            async with self.database.session() as session:
                totals = (await session.execute(
                    select(
                        func.count(table.id),
                        func.avg(table.confidence),
                        func.avg(table.processing_time)
                    )
                )).one()
                countries = (await session.execute(country_query)).all()
                types = (await session.execute(type_query)).all()
                activity = (await session.execute(activity_query)).all()
        except SQLAlchemyError as e:
            self.logger.error("Failed to compute statistics", error=str(e), exc_info=True)
            raise DatabaseError(
                message=f"Failed to compute statistics: {e}",
                operation="aggregate",
                table=table.__tablename__
            ) from e

        log_performance_event(
            self.logger,
            "stats_aggregation",
            time.perf_counter() - start_time,
            dialect=self.database.engine.dialect.name
        )

        total, avg_confidence, avg_processing_time = totals

        stats = StatsResponse(
            total_analyses=total or 0,
            average_confidence=round_half_up(avg_confidence),
            average_processing_time=round_half_up(avg_processing_time),
            country_distribution=[
                CountryCount(country=row.country, count=row.analyses)
                for row in countries
                if row.country is not None
            ],
            analysis_type_distribution=[
                AnalysisTypeCount(type=row.analysis_type, count=row.analyses)
                for row in types
            ],
            recent_activity=[
                DailyActivity(date=_format_day(row.activity_date), count=row.analyses)
                for row in activity
            ]
        )

        self.logger.info(
            "Statistics calculated",
            total_analyses=stats.total_analyses,
            average_confidence=stats.average_confidence
        )
        return stats
