from __future__ import annotations

from fastapi import HTTPException, Response, status


def etag_for(version: int) -> str:
    return f'"{version}"'


def parse_if_match(if_match: str | None) -> int | None:
    """
    Definition version the caller last saw, from an If-Match header.

    Accepts ``3``, ``"3"`` and weak ``W/"3"``. No header means no precondition.
    """
    if if_match is None:
        return None

    raw = if_match.strip()
    if raw.startswith("W/"):
        raw = raw[2:]
    raw = raw.strip('"')

    try:
        version = int(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid If-Match header (expected integer version)",
        )
    if version <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid If-Match header (version must be positive)",
        )
    return version


def assert_version_matches(*, current_version: int, if_match_version: int | None) -> None:
    if if_match_version is not None and current_version != if_match_version:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Form definition was changed by someone else",
                "expected": current_version,
                "got": if_match_version,
            },
        )


def set_etag(response: Response, version: int) -> None:
    response.headers["ETag"] = etag_for(version)
