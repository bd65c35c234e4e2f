"""
Base service layer for unified document store operations
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

from database.collections import DuplicateDocumentError

logger = logging.getLogger(__name__)

@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

class BaseService:
    """Base service wrapping one document collection"""

    def __init__(self, collection_name: str, database):
        self.collection_name = collection_name
        self.database = database
        self.collection = database.collection(collection_name)
        logger.debug(f"BaseService initialized for collection: {collection_name}")

    def _not_found(self, record_id: str) -> ServiceResult:
        return ServiceResult(
            success=False,
            error=f"Record not found with ID: {record_id}",
            error_type="RESOURCE_NOT_FOUND"
        )

    def _database_error(self, operation: str, e: Exception) -> ServiceResult:
        logger.error(f"{operation} operation failed for {self.collection_name}: {e}", exc_info=True)
        return ServiceResult(
            success=False,
            error=f"Database operation failed: {e}",
            error_type="DATABASE_ERROR"
        )

    async def create(self, data: Dict[str, Any]) -> ServiceResult:
        """
        Insert a new document

        Args:
            data: Document to insert, including its _id

        Returns:
            ServiceResult with the created document
        """
        try:
            document = await self.collection.insert_one(data)
            return ServiceResult(success=True, data=[document], count=1)

        except DuplicateDocumentError as e:
            return ServiceResult(
                success=False,
                error=str(e),
                error_type="CONFLICT"
            )
        except Exception as e:
            return self._database_error("Create", e)

    async def read(self, filters: Optional[Dict[str, Any]] = None) -> ServiceResult:
        """
        Read documents matching field-equality filters

        Args:
            filters: Dictionary of field filters {field_name: value}; a list
                value matches any of its elements

        Returns:
            ServiceResult with matched documents in insertion order
        """
        try:
            documents = await self.collection.find(filters)
            return ServiceResult(success=True, data=documents, count=len(documents))
        except Exception as e:
            return self._database_error("Read", e)

    async def get_by_id(self, record_id: str) -> ServiceResult:
        """
        Get a single document by _id

        Returns:
            ServiceResult with the document, or RESOURCE_NOT_FOUND
        """
        try:
            document = await self.collection.find_by_id(record_id)
        except Exception as e:
            return self._database_error("Read", e)

        if document is None:
            return self._not_found(record_id)
        return ServiceResult(success=True, data=[document], count=1)

    async def get_by_field(self, field_name: str, value: Any) -> ServiceResult:
        """Get documents by specific field value"""
        return await self.read(filters={field_name: value})

    async def update(self, record_id: str, data: Dict[str, Any]) -> ServiceResult:
        """
        Apply a partial update; fields not in data keep their values

        Returns:
            ServiceResult with the updated document, or RESOURCE_NOT_FOUND
        """
        try:
            document = await self.collection.update_by_id(record_id, data)
        except Exception as e:
            return self._database_error("Update", e)

        if document is None:
            return self._not_found(record_id)
        return ServiceResult(success=True, data=[document], count=1)

    async def delete(self, record_id: str) -> ServiceResult:
        """
        Delete a document by _id

        Returns:
            ServiceResult with the deleted document, or RESOURCE_NOT_FOUND
        """
        try:
            document = await self.collection.delete_by_id(record_id)
        except Exception as e:
            return self._database_error("Delete", e)

        if document is None:
            return self._not_found(record_id)
        return ServiceResult(success=True, data=[document], count=1)

    async def delete_many(self, filters: Dict[str, Any]) -> ServiceResult:
        """Delete every document matching filters; count holds the number removed"""
        try:
            deleted = await self.collection.delete_many(filters)
            return ServiceResult(success=True, data=[], count=deleted)
        except Exception as e:
            return self._database_error("Delete", e)
