"""
TIME INFORMATION UTILITY
========================

Returns the short, readable time stamped on every chat message (the time the
message was added to the log). Called by the chat session whenever it appends.
"""

import datetime
from typing import Optional


def get_display_time(now: Optional[datetime.datetime] = None) -> str:
    """Return the local time as H:MM:SS AM/PM, e.g. "3:07:09 PM" (no leading zero on the hour)."""
    now = now or datetime.datetime.now()
    return now.strftime("%I:%M:%S %p").lstrip("0")
