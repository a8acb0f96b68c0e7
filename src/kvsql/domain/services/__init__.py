"""Domain services for business logic.

Services map relational concepts onto a table's key-value namespace:
the schema codec handles column definitions, the row codec handles cells.
"""

from kvsql.domain.services.row_codec import RowCodec
from kvsql.domain.services.schema_codec import SchemaCodec

__all__ = [
    "RowCodec",
    "SchemaCodec",
]
