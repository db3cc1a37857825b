"""
Base class for records that keep columns they do not map.
"""
from dataclasses import dataclass
from typing import Any

from daotemplate.schema import transient


@dataclass
class BaseRecord:
    """Record base carrying unmapped result columns.

    When a record type derives from BaseRecord, columns returned by
    `DaoTemplate.query_by_sql` that match no field (joined columns,
    computed expressions) are stored in `props` keyed by upper-cased label.
    """
    props: dict[str, Any] = transient(default_factory=dict)
