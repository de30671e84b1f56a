"""
Supabase Record Store Implementation.

This module implements the RecordStore protocol using Supabase. Each
collection maps to a table of the same name whose columns are the document
fields (nested structures live in JSONB columns). Atomic batches go through
the apply_batch_writes Postgres function, which applies every op inside one
serializable transaction; update_where ops are evaluated there, against the
rows as they are at commit time.
"""
import json
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from supabase import Client

from application.exceptions import PersistenceError, ValidationError
from application.ports import BatchOp, Filter, FILTER_OPERATORS, OrderBy

logger = logging.getLogger(__name__)

# Filter operator -> postgrest builder method
_OPERATOR_METHODS = {
    "==": "eq",
    "!=": "neq",
    "<": "lt",
    "<=": "lte",
    ">": "gt",
    ">=": "gte",
    "in": "in_",
}


class SupabaseRecordStore:
    """
    Supabase implementation of RecordStore.

    Errors raised by the client are logged and re-raised as PersistenceError.
    """

    def __init__(self, client: Client):
        """
        Initialize with Supabase client.

        Args:
            client: Supabase client instance (injected)
        """
        self._client = client

    def add(self, collection: str, doc: Dict[str, Any]) -> str:
        """Insert a document, generating an id if it has none."""
        row = dict(doc)
        row.setdefault("id", str(uuid.uuid4()))
        try:
            result = self._client.table(collection).insert(row).execute()
        except Exception as e:
            logger.exception(f"Error inserting into {collection}")
            raise PersistenceError(f"Failed to insert into {collection}: {e}") from e

        if result.data:
            return result.data[0].get("id", row["id"])
        return row["id"]

    def batch_write(self, ops: Sequence[BatchOp]) -> None:
        """Apply ops atomically via the apply_batch_writes RPC."""
        if not ops:
            return
        for op in ops:
            for _, operator, _ in op.where:
                if operator not in FILTER_OPERATORS:
                    raise ValidationError(f"Unsupported filter operator '{operator}'")
        payload = [op.to_dict() for op in ops]
        try:
            self._client.rpc(
                "apply_batch_writes",
                {"p_ops": json.dumps(payload, default=str)},
            ).execute()
        except Exception as e:
            logger.exception(f"Batch write of {len(ops)} ops failed")
            raise PersistenceError(f"Batch write failed: {e}") from e

    def query(
        self,
        collection: str,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Select documents matching all filters."""
        builder = self._client.table(collection).select("*")

        for field, op, value in filters or []:
            if op not in FILTER_OPERATORS:
                raise ValidationError(f"Unsupported filter operator '{op}'")
            method = getattr(builder, _OPERATOR_METHODS[op])
            builder = method(field, list(value) if op == "in" else value)

        if order_by is not None:
            builder = builder.order(order_by.field, desc=order_by.descending)
        if limit is not None:
            builder = builder.limit(limit)

        try:
            result = builder.execute()
        except Exception as e:
            logger.exception(f"Error querying {collection}")
            raise PersistenceError(f"Failed to query {collection}: {e}") from e

        return result.data or []
