"""Annotates raw events with their normalized timestamp and type id"""
import json
import logging
from typing import Any, Dict, List, Optional

from msg_parse.azure_schema import (
    AZURE_DEFAULT_TYPE_ID,
    AZURE_TIMESTAMP_PATHS,
    AZURE_TYPE_ID_PATHS,
    split_records,
)
from msg_parse.message_parser import PathSpecs, get_msg_ts, get_msg_type_id
from msg_parse.path_spec import coerce_path_specs

logger = logging.getLogger(__name__)


class EventProcessingService:
    """Main service for annotating events"""

    def __init__(self, ts_paths: PathSpecs = None, type_id_paths: PathSpecs = None,
                 default_type_id: Any = AZURE_DEFAULT_TYPE_ID):
        self.ts_paths = coerce_path_specs(AZURE_TIMESTAMP_PATHS if ts_paths is None else ts_paths)
        self.type_id_paths = coerce_path_specs(AZURE_TYPE_ID_PATHS if type_id_paths is None else type_id_paths)
        self.default_type_id = default_type_id

    def annotate(self, event: Any) -> Dict[str, Any]:
        ts = get_msg_ts(event, self.ts_paths)
        return {
            'message': event,
            'message_ts': ts.seconds,
            'message_ts_us': ts.microseconds,
            'message_type_id': get_msg_type_id(event, self.type_id_paths, self.default_type_id),
        }

    def process_records(self, json_event: str) -> Optional[List[Dict[str, Any]]]:
        """
        Decode a payload and annotate every event it carries.

        Returns None when the payload cannot be decoded or holds no events.
        """
        try:
            payload = json.loads(json_event)
            records = split_records(payload)
            if not records:
                logger.warning(f"Dropping payload with no events: {json_event}")
                return None

            annotated = [self.annotate(record) for record in records]
            logger.debug(f"Annotated {len(annotated)} events")
            return annotated
        except json.JSONDecodeError as e:
            logger.error(f"Serialization error: {e}")
            return None
        except Exception:
            logger.error(f"Processing error for payload: {json_event}", exc_info=True)
            return None

    def process(self, json_event: str) -> Optional[str]:
        annotated = self.process_records(json_event)
        if annotated is None:
            return None
        return json.dumps(annotated)
