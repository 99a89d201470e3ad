"""
Document store for saved objects.

`DocumentStore` is the interface the rule sync code depends on.
`SqlDocumentStore` implements it on SQLite through SQLModel.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from csp_rules.core.database import get_engine
from csp_rules.persistence.filters import DocumentFilter
from csp_rules.persistence.models import (
    BulkCreateItemError,
    BulkCreateObject,
    BulkCreateResult,
    FindResult,
    SavedObject,
    SavedObjectRecord,
)

logger = logging.getLogger("csp.store")

DEFAULT_PER_PAGE = 20


class DocumentStoreError(Exception):
    """A store operation could not be completed."""


class DocumentNotFoundError(DocumentStoreError):
    """The addressed document does not exist."""

    def __init__(self, type: str, id: str):
        self.type = type
        self.id = id
        super().__init__(f"Saved object [{type}/{id}] not found")


class DocumentStore(ABC):
    """Abstract document repository."""

    @abstractmethod
    def find(
        self,
        type: str,
        filter: DocumentFilter | None = None,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> FindResult:
        """Return one page of documents of `type` matching `filter`."""

    @abstractmethod
    def bulk_create(self, objects: list[BulkCreateObject]) -> BulkCreateResult:
        """Create documents, reporting per-item failures in the result."""

    @abstractmethod
    def delete(self, type: str, id: str) -> None:
        """Delete one document.

        Raises:
            DocumentNotFoundError: if no such document exists
            DocumentStoreError: on any other failure
        """

    def find_all(
        self,
        type: str,
        filter: DocumentFilter | None = None,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> list[SavedObject]:
        """Collect every matching document, one page at a time."""
        collected: list[SavedObject] = []
        page = 1
        while True:
            result = self.find(type, filter=filter, page=page, per_page=per_page)
            collected.extend(result.saved_objects)
            if not result.saved_objects or len(collected) >= result.total:
                return collected
            page += 1


class SqlDocumentStore(DocumentStore):
    """Document store backed by the `saved_objects` SQLModel table."""

    def __init__(self, engine=None):
        self._engine = engine if engine is not None else get_engine()

    def find(
        self,
        type: str,
        filter: DocumentFilter | None = None,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> FindResult:
        if page < 1 or per_page < 1:
            raise ValueError(f"Invalid paging: page={page}, per_page={per_page}")
        if filter is not None and filter.type != type:
            raise ValueError(f"Filter for type '{filter.type}' used to find '{type}'")

        statement = select(SavedObjectRecord).where(SavedObjectRecord.type == type)
        if filter is not None:
            for path, value in filter.attributes.items():
                statement = statement.where(
                    func.json_extract(SavedObjectRecord.attributes_json, f"$.{path}") == value
                )

        try:
            with Session(self._engine) as session:
                total = session.exec(
                    select(func.count()).select_from(statement.subquery())
                ).one()
                records = session.exec(
                    statement.order_by(SavedObjectRecord.pk)
                    .offset((page - 1) * per_page)
                    .limit(per_page)
                ).all()
                saved_objects = [SavedObject.from_record(r) for r in records]
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Failed to find '{type}' documents: {e}") from e

        return FindResult(
            saved_objects=saved_objects,
            total=total,
            page=page,
            per_page=per_page,
        )

    def bulk_create(self, objects: list[BulkCreateObject]) -> BulkCreateResult:
        records: list[SavedObjectRecord] = []
        errors: list[BulkCreateItemError] = []

        for index, obj in enumerate(objects):
            if not obj.type:
                errors.append(BulkCreateItemError(index=index, type=obj.type, error="Missing type"))
                continue
            try:
                attributes_json = json.dumps(obj.attributes)
            except (TypeError, ValueError) as e:
                errors.append(BulkCreateItemError(index=index, type=obj.type, error=str(e)))
                continue
            records.append(SavedObjectRecord(type=obj.type, attributes_json=attributes_json))

        if not records:
            return BulkCreateResult(errors=errors)

        try:
            with Session(self._engine) as session:
                session.add_all(records)
                session.commit()
                for record in records:
                    session.refresh(record)
                created = [SavedObject.from_record(r) for r in records]
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Bulk create of {len(records)} documents failed: {e}") from e

        logger.debug(f"Created {len(created)} documents ({len(errors)} rejected)")
        return BulkCreateResult(saved_objects=created, errors=errors)

    def delete(self, type: str, id: str) -> None:
        try:
            with Session(self._engine) as session:
                record = session.exec(
                    select(SavedObjectRecord).where(
                        SavedObjectRecord.type == type,
                        SavedObjectRecord.id == id,
                    )
                ).first()
                if record is None:
                    raise DocumentNotFoundError(type, id)
                session.delete(record)
                session.commit()
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Failed to delete [{type}/{id}]: {e}") from e

    def get(self, type: str, id: str) -> SavedObject:
        """Fetch one document by id."""
        try:
            with Session(self._engine) as session:
                record = session.exec(
                    select(SavedObjectRecord).where(
                        SavedObjectRecord.type == type,
                        SavedObjectRecord.id == id,
                    )
                ).first()
                if record is None:
                    raise DocumentNotFoundError(type, id)
                return SavedObject.from_record(record)
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Failed to get [{type}/{id}]: {e}") from e
