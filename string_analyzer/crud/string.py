import logging
import threading
from datetime import timezone
from typing import Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from string_analyzer.exceptions import ConflictError, NotFoundError
from string_analyzer.models.string import StringAnalysis
from string_analyzer.schemas.string import StringProperties, StringRecord

logger = logging.getLogger(__name__)


class StringStore:
    """Keyed container of analyzed strings, addressed by SHA-256 fingerprint"""

    def insert(self, record: StringRecord) -> StringRecord:
        raise NotImplementedError

    def get(self, fingerprint: str) -> StringRecord:
        raise NotImplementedError

    def delete(self, fingerprint: str) -> None:
        raise NotImplementedError

    def list(self) -> List[StringRecord]:
        raise NotImplementedError

    def count(self) -> int:
        return len(self.list())

    def clear(self) -> None:
        raise NotImplementedError


class InMemoryStringStore(StringStore):
    """Dictionary-backed store; a single lock makes every operation atomic."""

    def __init__(self) -> None:
        self._records: Dict[str, StringRecord] = {}
        self._lock = threading.Lock()

    def insert(self, record: StringRecord) -> StringRecord:
        with self._lock:
            if record.id in self._records:
                raise ConflictError()
            # Stored copies are never handed out
            self._records[record.id] = record.model_copy(deep=True)
        logger.info(f"Stored string {record.id[:12]} (length={record.properties.length})")
        return record

    def get(self, fingerprint: str) -> StringRecord:
        with self._lock:
            record = self._records.get(fingerprint)
        if record is None:
            raise NotFoundError()
        return record.model_copy(deep=True)

    def delete(self, fingerprint: str) -> None:
        with self._lock:
            if self._records.pop(fingerprint, None) is None:
                raise NotFoundError()
        logger.info(f"Deleted string {fingerprint[:12]}")

    def list(self) -> List[StringRecord]:
        # Snapshot in insertion order
        with self._lock:
            records = list(self._records.values())
        return [record.model_copy(deep=True) for record in records]

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


def _to_record(row: StringAnalysis) -> StringRecord:
    created_at = row.created_at
    if created_at.tzinfo is None:
        # SQLite drops the offset; values are always written in UTC
        created_at = created_at.replace(tzinfo=timezone.utc)

    return StringRecord(
        id=row.id,
        value=row.value,
        properties=StringProperties(
            length=row.length,
            is_palindrome=row.is_palindrome,
            unique_characters=row.unique_characters,
            word_count=row.word_count,
            sha256_hash=row.sha256_hash,
            character_frequency_map=row.character_frequency_map,
        ),
        created_at=created_at,
    )


class SqlStringStore(StringStore):
    """SQLAlchemy-backed store using one session per operation"""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def insert(self, record: StringRecord) -> StringRecord:
        props = record.properties
        db_string = StringAnalysis(
            id=record.id,
            value=record.value,
            length=props.length,
            is_palindrome=props.is_palindrome,
            unique_characters=props.unique_characters,
            word_count=props.word_count,
            sha256_hash=props.sha256_hash,
            character_frequency_map=props.character_frequency_map,
            created_at=record.created_at,
        )

        db: Session = self.session_factory()
        try:
            if db.get(StringAnalysis, record.id) is not None:
                raise ConflictError()
            db.add(db_string)
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same value
            db.rollback()
            raise ConflictError()
        finally:
            db.close()

        logger.info(f"Stored string {record.id[:12]} (length={props.length})")
        return record

    def get(self, fingerprint: str) -> StringRecord:
        db: Session = self.session_factory()
        try:
            row = db.get(StringAnalysis, fingerprint)
            if row is None:
                raise NotFoundError()
            return _to_record(row)
        finally:
            db.close()

    def delete(self, fingerprint: str) -> None:
        db: Session = self.session_factory()
        try:
            deleted = db.query(StringAnalysis).filter(StringAnalysis.id == fingerprint).delete()
            db.commit()
        finally:
            db.close()

        if not deleted:
            raise NotFoundError()
        logger.info(f"Deleted string {fingerprint[:12]}")

    def list(self) -> List[StringRecord]:
        db: Session = self.session_factory()
        try:
            rows = db.query(StringAnalysis).order_by(
                StringAnalysis.created_at, StringAnalysis.id
            ).all()
            return [_to_record(row) for row in rows]
        finally:
            db.close()

    def count(self) -> int:
        db: Session = self.session_factory()
        try:
            return db.query(StringAnalysis).count()
        finally:
            db.close()

    def clear(self) -> None:
        db: Session = self.session_factory()
        try:
            db.query(StringAnalysis).delete()
            db.commit()
        finally:
            db.close()


def create_store(backend: str, database_url: str = None) -> StringStore:
    """Build the store selected by configuration"""
    if backend == "memory":
        return InMemoryStringStore()

    if backend == "sql":
        from string_analyzer.database import create_session_factory, init_db

        session_factory = create_session_factory(database_url)
        init_db(session_factory)
        return SqlStringStore(session_factory)

    raise ValueError(f"Unsupported store backend: {backend!r}")
