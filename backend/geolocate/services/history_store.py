"""
Append-only analysis history
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple, Union
from uuid import uuid4

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from ..database import AnalysisHistory, Database
from ..models.analysis import AnalysisType
from ..models.history import AnalysisHistoryItem
from ..utils.exceptions import DatabaseError


def as_utc(value: datetime) -> datetime:
    """Timestamps are written in UTC; SQLite returns them without an offset"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class HistoryStore:
    """
    Saves client-selected analyses and serves them newest first
    """

    def __init__(self, database: Database):
        self.database = database
        self.logger = structlog.get_logger("service.history_store")

    async def save(
        self,
        image_hash: str,
        location: Dict[str, Any],
        confidence: float,
        analysis_type: Union[AnalysisType, str],
        processing_time: int
    ) -> str:
        """
        Insert one history row

        The payload is trusted as supplied; it is not checked against a
        previous analysis.

        Returns:
            ID of the new row
        """
        analysis_id = str(uuid4())
        row = AnalysisHistory(
            id=analysis_id,
            image_hash=image_hash,
            location=location,
            confidence=confidence,
            analysis_type=AnalysisType(analysis_type).value,
            processing_time=processing_time
        )

        try:
            async with self.database.session() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            self.logger.error("Failed to save analysis", error=str(e), exc_info=True)
            raise DatabaseError(
                message=f"Failed to save analysis: {e}",
                operation="insert",
                table=AnalysisHistory.__tablename__
            ) from e

        self.logger.info(
            "Analysis saved",
            analysis_id=analysis_id,
            image_hash=image_hash,
            analysis_type=row.analysis_type
        )
        return analysis_id

    async def list(self, limit: int = 50, offset: int = 0) -> Tuple[List[AnalysisHistoryItem], int]:
        """
        Page through history, newest first

        Plain offset pagination; id breaks ties between equal timestamps.

        Args:
            limit: Page size
            offset: Rows to skip

        Returns:
            Items of the page and the total row count
        """
        query = (
            select(AnalysisHistory)
            .order_by(AnalysisHistory.created_at.desc(), AnalysisHistory.id.desc())
            .limit(limit)
            .offset(offset)
        )

        try:
            async with self.database.session() as session:
                rows = (await session.scalars(query)).all()
                total = await session.scalar(
                    select(func.count()).select_from(AnalysisHistory)
                )
        except SQLAlchemyError as e:
            self.logger.error("Failed to read history", error=str(e), exc_info=True)
            raise DatabaseError(
                message=f"Failed to read analysis history: {e}",
                operation="select",
                table=AnalysisHistory.__tablename__
            ) from e

        items = [
            AnalysisHistoryItem(
                id=row.id,
                image_hash=row.image_hash,
                location=row.location,
                confidence=row.confidence,
                analysis_type=row.analysis_type,
                created_at=as_utc(row.created_at),
                processing_time=row.processing_time
            )
            for row in rows
        ]

        self.logger.debug(
            "History retrieved",
            count=len(items),
            total=total,
            limit=limit,
            offset=offset
        )
        return items, total or 0
