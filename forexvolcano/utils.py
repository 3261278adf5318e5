import time
from datetime import datetime, timezone


def now_timestamp() -> float:
    return time.time()


def timestamp_to_datetime(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)
