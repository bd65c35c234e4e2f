"""
Document collections stored as JSONB rows

Each collection is a table with an ``_id`` primary key and a ``doc`` JSONB
column holding the full document (``_id`` included). Filters are
field-equality predicates: ``{"username": "alice"}`` matches documents
whose ``username`` equals ``"alice"``; a list value matches any of the
listed values, e.g. ``{"title": ["a", "b"]}``.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import asyncpg

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "messages")


class DuplicateDocumentError(Exception):
    """Raised when an insert collides with an existing _id or unique field"""


def build_filter_clause(filters: Optional[Dict[str, Any]], start: int = 1) -> Tuple[str, List[Any]]:
    """
    Build a WHERE clause for field-equality filters

    Args:
        filters: Mapping of field name to value or list of values
        start: Number of the first positional parameter to use

    Returns:
        Tuple of (sql fragment beginning with " WHERE " or empty, params)
    """
    if not filters:
        return "", []

    clauses = []
    params: List[Any] = []
    n = start

    for field_name, value in filters.items():
        many = isinstance(value, (list, tuple, set))

        if field_name == "_id":
            if many:
                clauses.append(f"_id = ANY(${n}::text[])")
                params.append([str(v) for v in value])
            else:
                clauses.append(f"_id = ${n}::text")
                params.append(str(value))
            n += 1
        elif many:
            # A JSON array contains a scalar that equals one of its elements
            clauses.append(f"${n}::jsonb @> (doc -> ${n + 1}::text)")
            params.extend([list(value), field_name])
            n += 2
        else:
            clauses.append(f"doc -> ${n}::text = ${n + 1}::jsonb")
            params.extend([field_name, value])
            n += 2

    return " WHERE " + " AND ".join(clauses), params


class DocumentCollection:
    """CRUD access to one collection of documents"""

    def __init__(self, database, name: str):
        if name not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {name}")
        self.database = database
        self.name = name

    async def insert_one(self, document: Dict[str, Any]) -> Dict[str, Any]:
        if "_id" not in document:
            raise ValueError("Document must carry an _id")

        query = f"INSERT INTO {self.name} (_id, doc) VALUES ($1, $2::jsonb) RETURNING doc"
        async with self.database.acquire() as conn:
            try:
                return await conn.fetchval(query, str(document["_id"]), document)
            except asyncpg.UniqueViolationError as e:
                raise DuplicateDocumentError(f"Duplicate document in {self.name}: {e}")

    async def find(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        where, params = build_filter_clause(filters)
        query = f"SELECT doc FROM {self.name}{where} ORDER BY seq"

        logger.debug(f"Executing READ query: {query}")
        async with self.database.acquire() as conn:
            rows = await conn.fetch(query, *params)
        return [row["doc"] for row in rows]

    async def find_one(self, filters: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        where, params = build_filter_clause(filters)
        query = f"SELECT doc FROM {self.name}{where} ORDER BY seq LIMIT 1"

        async with self.database.acquire() as conn:
            return await conn.fetchval(query, *params)

    async def find_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        return await self.find_one({"_id": document_id})

    async def update_by_id(self, document_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Shallow-merge fields into a document; returns None if it does not exist"""
        fields = {k: v for k, v in fields.items() if k != "_id"}
        query = f"UPDATE {self.name} SET doc = doc || $2::jsonb WHERE _id = $1 RETURNING doc"

        async with self.database.acquire() as conn:
            return await conn.fetchval(query, str(document_id), fields)

    async def push(self, document_id: str, field_name: str, value: Any) -> Optional[Dict[str, Any]]:
        """Append value to an array field, creating the array if missing"""
        query = (
            f"UPDATE {self.name} SET doc = jsonb_set(doc, ARRAY[$2::text], "
            f"COALESCE(doc -> $2::text, '[]'::jsonb) || jsonb_build_array($3::jsonb)) "
            f"WHERE _id = $1 RETURNING doc"
        )
        async with self.database.acquire() as conn:
            return await conn.fetchval(query, str(document_id), field_name, value)

    async def pull(self, document_id: str, field_name: str, value: Any) -> Optional[Dict[str, Any]]:
        """Remove every occurrence of value from an array field"""
        query = (
            f"UPDATE {self.name} SET doc = jsonb_set(doc, ARRAY[$2::text], COALESCE(("
            f"SELECT jsonb_agg(items.elem ORDER BY items.idx) "
            f"FROM jsonb_array_elements(COALESCE(doc -> $2::text, '[]'::jsonb)) "
            f"WITH ORDINALITY AS items(elem, idx) WHERE items.elem <> $3::jsonb"
            f"), '[]'::jsonb)) WHERE _id = $1 RETURNING doc"
        )
        async with self.database.acquire() as conn:
            return await conn.fetchval(query, str(document_id), field_name, value)

    async def delete_by_id(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Delete a document; returns the deleted document or None"""
        query = f"DELETE FROM {self.name} WHERE _id = $1 RETURNING doc"
        async with self.database.acquire() as conn:
            return await conn.fetchval(query, str(document_id))

    async def delete_many(self, filters: Optional[Dict[str, Any]] = None) -> int:
        where, params = build_filter_clause(filters)
        query = f"DELETE FROM {self.name}{where}"

        async with self.database.acquire() as conn:
            status = await conn.execute(query, *params)
        # status is e.g. "DELETE 3"
        return int(status.split()[-1])

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        where, params = build_filter_clause(filters)
        query = f"SELECT count(*) FROM {self.name}{where}"

        async with self.database.acquire() as conn:
            return await conn.fetchval(query, *params)
