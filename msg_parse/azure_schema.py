"""
Property paths for Azure Monitor activity and diagnostic log events.

Activity logs read through the REST API carry ``eventTimestamp`` and wrap
``category`` / ``operationName`` as ``{"value": ..., "localizedValue": ...}``.
Diagnostic logs exported to Event Hubs flatten those to plain strings and
use ``time``. Event Hub payloads batch events under ``records``.
"""
from typing import Any, List

from msg_parse.path_spec import PathSpec

AZURE_TIMESTAMP_PATHS = [
    PathSpec(['time']),
    PathSpec(['eventTimestamp']),
    PathSpec(['timeStamp']),
    PathSpec(['properties', 'eventTimestamp']),
]

# Nested '.value' first so an activity-log object never wins as the type id
AZURE_TYPE_ID_PATHS = [
    PathSpec(['category', 'value']),
    PathSpec(['category']),
    PathSpec(['operationName', 'value']),
    PathSpec(['operationName']),
]

AZURE_DEFAULT_TYPE_ID = 'azure-event'


def split_records(payload: Any) -> List[Any]:
    """Unwrap an Event Hub ``{"records": [...]}`` batch into its events"""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    records = payload.get('records')
    if isinstance(records, list):
        return records
    return [payload]
