"""
Secure media fetching for glif-mcp.

Workflow outputs are URLs chosen by a remote service, so fetching them is an
SSRF surface. The fetcher downloads a URL into memory only when:

- The scheme is http or https
- The host is not localhost, 0.0.0.0 or a private/loopback/link-local literal
- Every address the host resolves to is public (DNS rebinding prevention)
- The declared content-length and the received bytes stay under the ceiling
- The whole transfer finishes within the wall-clock timeout

URL and host checks run before any network I/O. Redirects are not followed,
since a redirect target would bypass the host checks. There is one attempt
and no retry; every failure raises a FetchError subclass.
"""

import asyncio
import base64
import ipaddress
import logging
import socket
from typing import Awaitable, Callable
from urllib.parse import urlparse

import httpx

from glifmcp.errors import FetchError, FetchTimeoutError, MediaTooLargeError, UnsafeUrlError, format_mib
from glifmcp.schema import MediaSettings

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")

BLOCKED_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "0.0.0.0"})

# Private IP ranges to block
PRIVATE_IP_RANGES = [
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),  # Link-local
    ipaddress.ip_network("::1/128"),  # IPv6 loopback
    ipaddress.ip_network("fc00::/7"),  # IPv6 private
    ipaddress.ip_network("fe80::/10"),  # IPv6 link-local
]

Resolver = Callable[[str], Awaitable[list[str]]]


def is_private_ip(ip_str: str) -> bool:
    """
    Check if an IP address is in a private range.

    Args:
        ip_str: IP address as a string

    Returns:
        True if the IP is private, False otherwise (including non-IPs)
    """
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_reserved
        or ip.is_link_local
        or ip.is_unspecified
        or any(ip in network for network in PRIVATE_IP_RANGES)
    )


def is_blocked_host(hostname: str) -> bool:
    """Check a URL host (name or IP literal) against the local/private deny list."""
    host = hostname.strip("[]").rstrip(".").lower()
    if host in BLOCKED_HOSTNAMES or host.endswith(".localhost"):
        return True
    return is_private_ip(host)


def check_url(url: str) -> str:
    """
    Validate a URL before fetching it.

    Args:
        url: The URL to validate

    Returns:
        The URL's hostname

    Raises:
        UnsafeUrlError: If the URL is malformed, not http(s), or points at a
            local/private host
    """
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise UnsafeUrlError(url=url, reason="malformed", message=f"Invalid URL: {e}") from e

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise UnsafeUrlError(
            url=url,
            reason="protocol",
            message=f"Invalid protocol: {parsed.scheme or '(none)'}:. Only HTTP/HTTPS allowed",
        )
    if not hostname:
        raise UnsafeUrlError(url=url, reason="malformed", message=f"Invalid URL: no host in {url}")
    if is_blocked_host(hostname):
        raise UnsafeUrlError(
            url=url,
            reason="private_host",
            message=f"Private/local IP addresses not allowed: {hostname}",
        )
    return hostname


async def resolve_hostname(hostname: str) -> list[str]:
    """
    Resolve a hostname to IP addresses without blocking the event loop.

    Raises:
        socket.gaierror: If DNS resolution fails
    """
    loop = asyncio.get_running_loop()
    addr_info = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    return list({info[4][0] for info in addr_info})


class SecureFetcher:
    """
    Download remote media under SSRF, size and time constraints.

    Usage:
        fetcher = SecureFetcher.from_settings(settings.media)
        data = await fetcher.fetch_base64("https://cdn.example.com/out.png")

    Attributes:
        max_bytes: Size ceiling for declared and received bodies
        timeout_seconds: Wall-clock limit for one transfer
        user_agent: User-Agent header value
    """

    def __init__(
        self,
        max_bytes: int = 10 * 1024 * 1024,
        timeout_seconds: float = 30,
        user_agent: str = "glif-mcp-server/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
        resolver: Resolver | None = None,
    ) -> None:
        self.max_bytes = max_bytes
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self._transport = transport
        self._resolver = resolver or resolve_hostname

    @classmethod
    def from_settings(cls, media: MediaSettings, **kwargs: object) -> "SecureFetcher":
        """Build a fetcher from the configured media limits."""
        return cls(
            max_bytes=media.max_bytes,
            timeout_seconds=media.timeout_seconds,
            user_agent=media.user_agent,
            **kwargs,
        )

    async def fetch_base64(self, url: str) -> str:
        """Fetch a URL and return its body base64-encoded."""
        body = await self.fetch(url)
        return base64.b64encode(body).decode("ascii")

    async def fetch(self, url: str) -> bytes:
        """
        Fetch a URL into memory.

        The URL checks run before any network I/O. DNS resolution and the
        transfer share one wall-clock timeout.

        Raises:
            UnsafeUrlError: URL rejected before any network I/O
            MediaTooLargeError: Declared or received size above the ceiling
            FetchTimeoutError: Resolution and transfer exceeded the timeout
            FetchError: Any other failure (HTTP status, DNS, transport)
        """
        try:
            hostname = check_url(url)
            return await asyncio.wait_for(
                self._resolve_and_download(url, hostname),
                timeout=self.timeout_seconds,
            )
        except FetchError:
            raise
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise FetchTimeoutError(url=url, timeout_seconds=self.timeout_seconds) from e
        except Exception as e:
            raise FetchError(url=url, message=f"URL conversion failed: {e}") from e

    async def _resolve_and_download(self, url: str, hostname: str) -> bytes:
        await self._check_resolved(url, hostname)
        return await self._download(url)

    async def _check_resolved(self, url: str, hostname: str) -> None:
        """DNS rebinding prevention: every resolved address must be public."""
        try:
            resolved_ips = await self._resolver(hostname)
        except (OSError, UnicodeError) as e:
            # UnicodeError: hostname fails IDNA encoding (empty or overlong label)
            raise FetchError(url=url, message=f"DNS resolution failed for {hostname}: {e}") from e

        if not resolved_ips:
            raise FetchError(url=url, message=f"No IP addresses found for {hostname}")

        for ip in resolved_ips:
            if is_private_ip(ip):
                raise UnsafeUrlError(
                    url=url,
                    reason="dns_rebinding",
                    message=f"Private/local IP addresses not allowed: {hostname} resolves to {ip}",
                )

    async def _download(self, url: str) -> bytes:
        headers = {
            "Range": f"bytes=0-{self.max_bytes}",
            "User-Agent": self.user_agent,
        }
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.timeout_seconds,
            follow_redirects=False,
        ) as client:
            async with client.stream("GET", url, headers=headers) as response:
                if not response.is_success:
                    raise FetchError(
                        url=url,
                        message=f"HTTP {response.status_code}: {response.reason_phrase}",
                    )

                # Check declared size before reading the body
                content_length = response.headers.get("content-length")
                if content_length:
                    try:
                        declared = int(content_length)
                    except ValueError:
                        declared = None  # Invalid content-length header, rely on the byte count
                    if declared is not None and declared > self.max_bytes:
                        raise MediaTooLargeError(
                            url=url,
                            size_bytes=declared,
                            max_bytes=self.max_bytes,
                        )

                chunks: list[bytes] = []
                total_size = 0
                async for chunk in response.aiter_bytes():
                    total_size += len(chunk)
                    if total_size > self.max_bytes:
                        raise self._downloaded_too_large(url, total_size)
                    chunks.append(chunk)

        body = b"".join(chunks)
        # Servers may omit or misstate content-length
        if len(body) > self.max_bytes:
            raise self._downloaded_too_large(url, len(body))

        logger.debug("Fetched %d bytes from %s", len(body), url)
        return body

    def _downloaded_too_large(self, url: str, size: int) -> MediaTooLargeError:
        return MediaTooLargeError(
            url=url,
            size_bytes=size,
            max_bytes=self.max_bytes,
            message=f"Downloaded file too large: {size}+ bytes (max {format_mib(self.max_bytes)})",
        )
