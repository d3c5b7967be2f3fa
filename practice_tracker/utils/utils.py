from datetime import datetime, UTC
from enum import Enum


class Platform(str, Enum):
    leetcode = "leetcode"
    geeksforgeeks = "geeksforgeeks"
    interviewbit = "interviewbit"
    unknown = "unknown"


def get_platform(link: str | None) -> Platform:
    link = (link or "").lower()
    if "leetcode" in link:
        return Platform.leetcode
    if "geeksforgeeks" in link:
        return Platform.geeksforgeeks
    if "interviewbit" in link:
        return Platform.interviewbit
    return Platform.unknown


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every datetime column is stored in."""
    return datetime.now(UTC).replace(tzinfo=None)
