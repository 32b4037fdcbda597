"""Persistence layer for saved mortgage calculations.

Saved calculations and the last-entered calculator values are kept per user
token in a SQL database through SQLAlchemy. SQLite is the default for local
use, but any SQLAlchemy URL works. Records go in and come out as plain
``{id, date, name, values, results}`` dictionaries produced by
``bolan_calc.export``; the store never runs a calculation itself.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SavedCalculationModel(Base):
    __tablename__ = "saved_calculations"

    id = Column(String(64), primary_key=True)
    user_token = Column(String(64), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    date = Column(String(64), nullable=False)
    values_json = Column(Text, nullable=False)
    results_json = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class CalculatorValuesModel(Base):
    __tablename__ = "calculator_values"

    user_token = Column(String(64), primary_key=True)
    values_json = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class CalculationStore:
    """Database-backed store of saved calculations."""

    def __init__(self, url: str, *, max_per_user: int = 50) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    def list_calculations(self, user_token: str) -> List[Dict[str, Any]]:
        if not user_token:
            return []
        with self._session_factory() as session:
            rows: Iterable[SavedCalculationModel] = session.execute(
                select(SavedCalculationModel)
                .where(SavedCalculationModel.user_token == user_token)
                .order_by(SavedCalculationModel.created_at.asc())
            ).scalars()
            return [self._to_dict(row) for row in rows]

    def get_calculation(self, user_token: str, calculation_id: str) -> Optional[Dict[str, Any]]:
        if not user_token:
            return None
        with self._session_factory() as session:
            row = session.get(SavedCalculationModel, calculation_id)
            if row is None or row.user_token != user_token:
                return None
            return self._to_dict(row)

    def add_calculation(self, user_token: str, record: Dict[str, Any]) -> None:
        """Store a ``{id, date, name, values, results}`` record."""
        if not user_token:
            return
        payload = SavedCalculationModel(
            id=record["id"],
            user_token=user_token,
            name=record["name"],
            date=record["date"],
            values_json=json.dumps(record["values"]),
            results_json=json.dumps(record["results"]),
        )
        with self._session_factory() as session:
            session.add(payload)
            session.commit()
        logger.info("Saved calculation %s for user %s", record["id"], user_token)
        self._trim_user(user_token)

    def update_calculation(self, user_token: str, record: Dict[str, Any]) -> bool:
        """Replace a stored record; returns ``False`` if it does not exist."""
        if not user_token:
            return False
        with self._session_factory() as session:
            row = session.get(SavedCalculationModel, record["id"])
            if row is None or row.user_token != user_token:
                return False
            row.name = record["name"]
            row.date = record["date"]
            row.values_json = json.dumps(record["values"])
            row.results_json = json.dumps(record["results"])
            session.commit()
        logger.info("Updated calculation %s", record["id"])
        return True

    def remove_calculation(self, user_token: str, calculation_id: str) -> bool:
        if not user_token:
            return False
        with self._session_factory() as session:
            row = session.get(SavedCalculationModel, calculation_id)
            if row and row.user_token == user_token:
                session.delete(row)
                session.commit()
                logger.info("Deleted calculation %s", calculation_id)
                return True
        return False

    def clear_calculations(self, user_token: str) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            session.execute(
                SavedCalculationModel.__table__.delete().where(
                    SavedCalculationModel.user_token == user_token
                )
            )
            session.commit()

    def save_values(self, user_token: str, values: Dict[str, Any]) -> None:
        """Remember the calculator inputs last entered by a user."""
        if not user_token:
            return
        with self._session_factory() as session:
            row = session.get(CalculatorValuesModel, user_token)
            if row is None:
                session.add(CalculatorValuesModel(user_token=user_token, values_json=json.dumps(values)))
            else:
                row.values_json = json.dumps(values)
            session.commit()

    def load_values(self, user_token: str) -> Optional[Dict[str, Any]]:
        if not user_token:
            return None
        with self._session_factory() as session:
            row = session.get(CalculatorValuesModel, user_token)
            return json.loads(row.values_json) if row else None

    def _trim_user(self, user_token: str) -> None:
        if not self._max_per_user or self._max_per_user < 0:
            return
        with self._session_factory() as session:
            rows = session.execute(
                select(SavedCalculationModel)
                .where(SavedCalculationModel.user_token == user_token)
                .order_by(SavedCalculationModel.created_at.desc())
            ).scalars().all()
            if len(rows) <= self._max_per_user:
                return
            for row in rows[self._max_per_user :]:
                session.delete(row)
            session.commit()
        logger.info("Trimmed saved calculations of user %s to %d", user_token, self._max_per_user)

    @staticmethod
    def _to_dict(row: SavedCalculationModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "date": row.date,
            "name": row.name,
            "values": json.loads(row.values_json),
            "results": json.loads(row.results_json),
        }


def create_store_from_env(url: Optional[str], max_per_user: Optional[str] = None) -> CalculationStore:
    return CalculationStore(
        url or "sqlite:///saved_calculations.sqlite3",
        max_per_user=int(max_per_user) if max_per_user else 50,
    )
