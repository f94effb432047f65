"""Normalizes raw message timestamps to epoch seconds plus microseconds"""
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as dt_parser

from msg_parse.normalized_timestamp import NormalizedTimestamp

logger = logging.getLogger(__name__)

# Length of the fixed-width prefix 'YYYY-MM-DDTHH:MM:SS.'
ISO8601_MICROSEC_OFFSET = 20
MICROSEC_DIGITS = 6
MILLISECONDS_SINCE_EPOCH = 1000000000000
MAX_MILLISECONDS_SINCE_EPOCH = 9999999999999
SECONDS_SINCE_EPOCH = 1000000000

_OFFSET_SUFFIX = re.compile(r'Z|\+.*$')
_LEADING_DIGITS = re.compile(r'[0-9]+')

# Fields missing from a partial date string are filled from the epoch, not from today
_PARSE_DEFAULT = datetime(1970, 1, 1)


def parse_ts(ts: Any) -> NormalizedTimestamp:
    """
    Normalize a raw timestamp value.

    Numbers are read as epoch milliseconds or epoch seconds depending on
    their magnitude. Anything else goes through general date parsing, with
    the microseconds sliced separately out of ISO-8601 strings such as
    '2018-12-19T08:18:21.1834546Z'. Never raises: unusable input falls back
    to the current time.
    """
    if isinstance(ts, (int, float)) and not isinstance(ts, bool):
        return _parse_epoch(ts)

    seconds = _parse_date_seconds(ts)
    micro = parse_ts_usec(ts)
    if seconds is None:
        logger.debug(f"Could not parse timestamp: {ts!r}, using current time")
        return NormalizedTimestamp.current()
    return NormalizedTimestamp(seconds, micro)


def _parse_epoch(ts) -> NormalizedTimestamp:
    if MILLISECONDS_SINCE_EPOCH <= ts <= MAX_MILLISECONDS_SINCE_EPOCH:
        usec = int((ts % 1000) * 1000)
        return NormalizedTimestamp(int(math.floor(ts / 1000)), usec or None)
    if SECONDS_SINCE_EPOCH <= ts < MILLISECONDS_SINCE_EPOCH:
        return NormalizedTimestamp(int(math.floor(ts)), None)
    logger.debug(f"Numeric timestamp out of epoch range: {ts!r}, using current time")
    return NormalizedTimestamp.current()


def _parse_date_seconds(ts: Any) -> Optional[int]:
    if not isinstance(ts, str):
        return None
    try:
        dt = dt_parser.parse(ts, default=_PARSE_DEFAULT)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        seconds = int(math.floor(dt.timestamp()))
    except (ValueError, OverflowError, TypeError):
        return None
    # Pre-epoch dates are not supported
    return seconds if seconds >= 0 else None


def parse_ts_usec(ts: Any) -> Optional[int]:
    """Microseconds sliced from the fractional part of an ISO-8601 string, or None"""
    if not isinstance(ts, str) or len(ts) <= ISO8601_MICROSEC_OFFSET:
        return None
    try:
        micro_str = ts[ISO8601_MICROSEC_OFFSET:ISO8601_MICROSEC_OFFSET + MICROSEC_DIGITS]
        micro_str = _OFFSET_SUFFIX.sub('', micro_str)
        if micro_str:
            micro_str = micro_str.ljust(MICROSEC_DIGITS, '0')
        match = _LEADING_DIGITS.match(micro_str)
        return int(match.group()) if match else None
    except (ValueError, TypeError):
        # Unable to get microseconds from the timestamp
        return None
