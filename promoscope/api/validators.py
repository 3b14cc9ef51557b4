"""Validation helpers for scrape request payloads."""

from __future__ import annotations

import ipaddress
from urllib.parse import urlparse

from fastapi import HTTPException

from promoscope.extraction.playlist import playlist_id_from_url

_ALLOWED_SCHEMES = {"http", "https"}


def validate_source_url(url: str | None, block_private_network_targets: bool = True) -> str:
    """Return the trimmed source URL or raise a 400.

    Only http(s) URLs with a hostname are accepted; literal IPs that are not
    globally routable are refused unless the block is turned off.
    """
    url = (url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="URL required")

    parsed = urlparse(url)
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid URL scheme '{parsed.scheme}'. Allowed schemes: http, https.",
        )
    if not parsed.hostname:
        raise HTTPException(status_code=400, detail="URL must include a hostname.")

    if block_private_network_targets:
        host_ip = _parse_ip(parsed.hostname.lower().rstrip("."))
        if host_ip and not host_ip.is_global:
            raise HTTPException(status_code=400, detail="URL points to a blocked internal IP.")

    return url


def require_playlist_id(url: str) -> str:
    """The playlist id embedded in ``url``; 400 when there is none."""
    playlist_id = playlist_id_from_url(url)
    if not playlist_id:
        raise HTTPException(status_code=400, detail="Invalid Spotify playlist URL")
    return playlist_id


def _parse_ip(hostname: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    try:
        return ipaddress.ip_address(hostname)
    except ValueError:
        return None
