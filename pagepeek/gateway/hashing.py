import hashlib


def _fingerprint_digest(fingerprint: str, page: int) -> str:
    if page != 1:
        fingerprint = f"{fingerprint}-p{page}"
    return hashlib.md5(fingerprint.encode("utf-8"), usedforsecurity=False).hexdigest()


def calculate_path_etag(path: str, width: int, height: int, page: int = 1) -> str:
    """ETag for a path-addressed preview, over the effective (defaulted) dimensions."""
    return _fingerprint_digest(f"{path}-{width}x{height}", page)


def calculate_period_etag(period: str, filename: str, width: int, height: int, page: int = 1) -> str:
    """ETag for a period/filename-addressed preview, over the effective (defaulted) dimensions."""
    return _fingerprint_digest(f"{period}-{filename}-{width}x{height}", page)
