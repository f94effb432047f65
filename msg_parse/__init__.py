"""Timestamp and type id extraction for loosely structured monitoring events"""
from msg_parse.message_parser import get_msg_ts, get_msg_type_id
from msg_parse.normalized_timestamp import NormalizedTimestamp
from msg_parse.path_spec import PathSpec
from msg_parse.property_path_resolver import get_prop, iterate_prop_paths
from msg_parse.timestamp_parser import parse_ts

__all__ = [
    'NormalizedTimestamp',
    'PathSpec',
    'get_msg_ts',
    'get_msg_type_id',
    'get_prop',
    'iterate_prop_paths',
    'parse_ts',
]
