"""Message timestamp and type id extraction"""
from typing import Any, Dict, Iterable, Union

from msg_parse.normalized_timestamp import NormalizedTimestamp
from msg_parse.path_spec import PathSpec
from msg_parse.property_path_resolver import is_present, is_truthy, iterate_prop_paths
from msg_parse.timestamp_parser import parse_ts

PathSpecs = Iterable[Union[PathSpec, Dict[str, Any]]]


def get_msg_ts(msg: Any, ts_paths: PathSpecs) -> NormalizedTimestamp:
    msg_ts = iterate_prop_paths(ts_paths, msg)
    return parse_ts(msg_ts) if is_truthy(msg_ts) else NormalizedTimestamp.current()


def get_msg_type_id(msg: Any, type_id_paths: PathSpecs, default: Any = None) -> Any:
    msg_type = iterate_prop_paths(type_id_paths, msg)
    return msg_type if is_present(msg_type) else default
