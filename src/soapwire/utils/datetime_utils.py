# soapwire/utils/datetime_utils.py
"""
Datetime utilities for SOAP messages.

Provides the xs:dateTime format used in WS-Security timestamps and a pattern
that recognises such values in message text.
"""

import re
from datetime import UTC, date, datetime

# xs:dateTime with second precision and a literal 'Z' (UTC)
SOAP_DATETIME_FORMAT: str = '%Y-%m-%dT%H:%M:%SZ'

# Matches values starting with a date and time, with or without zone suffix
SOAP_DATETIME_PATTERN: re.Pattern[str] = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}')


def format_for_soap(dt: date | datetime) -> str:
    """
    Format a date or datetime object as a SOAP xs:dateTime string.

    The output is always UTC with second precision:
    YYYY-MM-DDThh:mm:ssZ

    Args:
        dt: A date or datetime object. If a date is provided, it will be
            converted to datetime at midnight UTC. If a datetime without
            timezone info is provided, UTC timezone is assumed. Aware
            datetimes are converted to UTC first.

    Returns:
        The formatted timestamp string.

    Examples:
        >>> from datetime import datetime, timezone, timedelta
        >>>
        >>> format_for_soap(datetime(2012, 3, 22, 16, 22, 33))
        '2012-03-22T16:22:33Z'
        >>>
        >>> dt = datetime(2012, 3, 22, 10, 22, 33,
        ...               tzinfo=timezone(timedelta(hours=-6)))
        >>> format_for_soap(dt)
        '2012-03-22T16:22:33Z'
    """
    # Convert date to datetime at midnight UTC if needed
    if isinstance(dt, date) and not isinstance(dt, datetime): # pyright: ignore[reportUnnecessaryIsInstance]
        dt = datetime.combine(dt, datetime.min.time(), tzinfo=UTC)

    # If datetime is naive (no timezone), assume UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC).strftime(SOAP_DATETIME_FORMAT)
