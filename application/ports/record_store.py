"""
Record Store Interface (Port).

Generic document store the training core persists into. Implementations
must make batch_write all-or-nothing: either every op is applied or none is.
Batches are isolated from each other, so an "update_where" op sees every
batch committed before it.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Protocol, Sequence, Tuple

# (field, operator, value), operator one of FILTER_OPERATORS
Filter = Tuple[str, str, Any]

FILTER_OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "in")


@dataclass(frozen=True)
class OrderBy:
    """Sort order for a query."""
    field: str
    descending: bool = False


@dataclass
class BatchOp:
    """A single write inside an atomic batch.

    Attributes:
        kind: "set" (create or replace), "update" (merge fields), "delete",
            or "update_where" (merge fields into every document matching
            `where` at the moment the batch is applied)
        collection: Target collection name
        doc_id: Document identifier, empty for update_where
        data: Document body for set/update/update_where, ignored for delete
        where: Filters selecting the documents of an update_where
    """
    kind: Literal["set", "update", "delete", "update_where"]
    collection: str
    doc_id: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    where: Tuple[Filter, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "collection": self.collection,
            "doc_id": self.doc_id,
            "data": self.data,
            "where": [{"field": f, "op": op, "value": v} for f, op, v in self.where],
        }


class RecordStore(Protocol):
    """
    Abstract interface for the document store.

    Documents are plain dicts carrying their identifier under "id".
    """

    def add(self, collection: str, doc: Dict[str, Any]) -> str:
        """
        Insert a document and return its identifier.

        Args:
            collection: Collection name
            doc: Document body. An "id" key is honoured if present.

        Returns:
            The stored document's id

        Raises:
            PersistenceError: If the write fails
        """
        ...

    def batch_write(self, ops: Sequence[BatchOp]) -> None:
        """
        Apply all ops atomically.

        Raises:
            PersistenceError: If the batch fails. Nothing is applied in that case.
        """
        ...

    def query(
        self,
        collection: str,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Return the documents matching every filter.

        Args:
            collection: Collection name
            filters: (field, operator, value) triples, combined with AND
            order_by: Optional sort order
            limit: Optional cap on the number of documents returned

        Raises:
            PersistenceError: If the read fails
        """
        ...
