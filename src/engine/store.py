# src/engine/store.py
"""
PersistentStore: durable key/value store of whole JSON documents.
"""

import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from engine.errors import PersistenceFailure
from engine.models import StoreEntry


class PersistentStore:
    def __init__(self, session_factory=None):
        if session_factory is None:
            from engine.db import SessionLocal
            session_factory = SessionLocal
        self.session_factory = session_factory

    def get(self, key: str, default: Any = None) -> Any:
        db = self.session_factory()
        try:
            entry = db.get(StoreEntry, key)
            if entry is None:
                return default
            return json.loads(entry.value)
        except SQLAlchemyError as e:
            logging.error(f"[store key={key}] Read failed: {e}")
            raise PersistenceFailure(f"Failed to read '{key}'", details={"key": key}) from e
        except ValueError as e:
            logging.error(f"[store key={key}] Stored value is not valid JSON: {e}")
            raise PersistenceFailure(f"Corrupt value stored under '{key}'", details={"key": key}) from e
        finally:
            db.close()

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        db = self.session_factory()
        try:
            entry = db.get(StoreEntry, key)
            if entry is None:
                db.add(StoreEntry(key=key, value=payload))
            else:
                entry.value = payload
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logging.error(f"[store key={key}] Write failed: {e}")
            raise PersistenceFailure(f"Failed to write '{key}'", details={"key": key}) from e
        finally:
            db.close()
