from datetime import datetime, timezone


def utcnow() -> datetime:
    """DB 저장용 timezone 없는 UTC 현재 시각"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
