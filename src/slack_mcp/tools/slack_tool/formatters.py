"""
CSV rendering for tool results.

Tool output is a CSV table whose last column carries the pagination cursor.
Only the final row gets a value, so callers can read "the last cell" to find
out whether another page exists.
"""
from __future__ import annotations

import csv
import io
from typing import Any, Sequence

from .platforms.base import Channel, Message, User

CHANNEL_HEADER = ("ID", "Name", "Topic", "Purpose", "MemberCount", "Cursor")

MESSAGE_HEADER = (
    "MsgID",
    "UserID",
    "UserName",
    "RealName",
    "Channel",
    "ThreadTs",
    "Text",
    "Time",
    "Cursor",
)


def to_csv(
    header: Sequence[str],
    rows: Sequence[Sequence[Any]],
    cursor: str = "",
) -> str:
    """
    Render rows as CSV, appending a Cursor cell to each row.

    Args:
        header: Column names, ending with "Cursor"
        rows: Data rows without the cursor column
        cursor: Next-page cursor; written on the last row only

    Returns:
        CSV text. With no rows the output is the header line, plus a row
        holding only the cursor when one is given
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)

    if not rows and cursor:
        writer.writerow([""] * (len(header) - 1) + [cursor])

    last = len(rows) - 1
    for i, row in enumerate(rows):
        writer.writerow([*row, cursor if i == last else ""])

    return buffer.getvalue()


def channels_to_csv(channels: Sequence[Channel], cursor: str = "") -> str:
    rows = [
        (ch.id, f"#{ch.name}", ch.topic, ch.purpose, ch.member_count)
        for ch in channels
    ]
    return to_csv(CHANNEL_HEADER, rows, cursor)


def messages_to_csv(
    messages: Sequence[Message],
    users: dict[str, User],
    cursor: str = "",
) -> str:
    rows = []
    for msg in messages:
        user = users.get(msg.user_id)
        rows.append((
            msg.id,
            msg.user_id,
            user.name if user else msg.user_id,
            user.real_name if user else msg.user_id,
            msg.channel,
            msg.thread_id or "",
            msg.text,
            msg.timestamp,
        ))
    return to_csv(MESSAGE_HEADER, rows, cursor)
