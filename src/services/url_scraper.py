"""URL scraping service for previewing bookmark metadata (title, description, favicon)."""
import ipaddress
import logging
import socket
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; Bookmarks/1.0)'
DEFAULT_TIMEOUT = 10.0

# <link rel> values that point at a site icon, in order of preference
APPLE_TOUCH_RELS = frozenset({'apple-touch-icon', 'apple-touch-icon-precomposed'})


class SSRFBlockedError(Exception):
    """Raised when a URL targets a private/internal network address."""

    pass


def is_private_ip(ip_str: str) -> bool:
    """
    Check if an IP address is private, loopback, or otherwise internal.

    Args:
        ip_str: IP address string (IPv4 or IPv6).

    Returns:
        True if the IP is private/internal, False if public.
    """
    try:
        ip = ipaddress.ip_address(ip_str)
        return (
            ip.is_private
            or ip.is_loopback
            or ip.is_link_local
            or ip.is_multicast
            or ip.is_reserved
            or ip.is_unspecified
        )
    except ValueError:
        # If we can't parse it, block it to be safe
        return True


def validate_url_not_private(url: str) -> None:
    """
    Validate that a URL does not target a private/internal network.

    Resolves the hostname to check the actual IP address, preventing
    DNS rebinding attacks where a hostname resolves to an internal IP.

    Raises:
        SSRFBlockedError: If the URL targets a private network.
        ValueError: If the URL is malformed or the hostname does not resolve.
    """
    parsed = urlparse(url)
    hostname = parsed.hostname

    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")

    if hostname.lower() in ('localhost', 'localhost.localdomain'):
        raise SSRFBlockedError(f"Blocked request to localhost: {url}")

    try:
        addrinfo = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ValueError(f"Could not resolve hostname: {hostname}") from e

    # sockaddr is (ip, port) for IPv4 or (ip, port, flow, scope) for IPv6
    for _, _, _, _, sockaddr in addrinfo:
        ip_str = sockaddr[0]
        if is_private_ip(ip_str):
            raise SSRFBlockedError(
                f"Blocked request to private/internal address: {url} resolves to {ip_str}",
            )


@dataclass
class FetchResult:
    """Result of fetching a URL (raw HTML before extraction)."""

    html: str | None
    final_url: str
    status_code: int | None
    content_type: str | None
    error: str | None


@dataclass
class ExtractedMetadata:
    """Extracted title, description and favicon from HTML."""

    title: str | None
    description: str | None
    favicon: str | None


@dataclass
class PagePreview:
    """Result of fetching a URL and extracting its metadata."""

    metadata: ExtractedMetadata
    final_url: str
    error: str | None


async def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> FetchResult:  # noqa: ASYNC109
    """
    Fetch HTML from a URL.

    Best-effort fetch that returns error info on failure rather than raising.
    Follows redirects and captures the final URL. Both the requested and the
    final URL are checked against private/internal networks.

    Args:
        url:
            The URL to fetch.
        timeout:
            Request timeout in seconds.

    Returns:
        FetchResult containing the HTML or error info.
    """
    try:
        validate_url_not_private(url)
    except (SSRFBlockedError, ValueError) as e:
        return FetchResult(
            html=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error=str(e),
        )

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
            http2=True,
        ) as client:
            response = await client.get(url)

            final_url_str = str(response.url)
            try:
                validate_url_not_private(final_url_str)
            except (SSRFBlockedError, ValueError) as e:
                return FetchResult(
                    html=None,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=None,
                    error=f"Redirect blocked: {e}",
                )

            content_type = response.headers.get('content-type', '')

            if not response.is_success:
                return FetchResult(
                    html=None,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=content_type,
                    error=f"HTTP {response.status_code}",
                )

            if 'text/html' not in content_type.lower():
                return FetchResult(
                    html=None,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=content_type,
                    error=f"Unsupported content type: {content_type}",
                )

            return FetchResult(
                html=response.text,
                final_url=final_url_str,
                status_code=response.status_code,
                content_type=content_type,
                error=None,
            )
    except httpx.TimeoutException:
        return FetchResult(
            html=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error="Request timed out",
        )
    except httpx.RequestError as e:
        return FetchResult(
            html=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error=f"Request failed: {e}",
        )


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find('meta', attrs=attrs)
    if tag and tag.get('content'):
        return tag['content'].strip() or None
    return None


def default_favicon_url(page_url: str) -> str | None:
    """Conventional /favicon.ico location for the page's origin."""
    parsed = urlparse(page_url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}/favicon.ico"


def _favicon_rank(link: Tag) -> int | None:
    """Rank an icon <link> by preference (lower is better), or None if it is not one."""
    rel = link.get('rel') or []
    # BeautifulSoup parses rel as a multi-valued attribute
    tokens = {token.lower() for token in (rel if isinstance(rel, list) else str(rel).split())}
    if 'icon' in tokens:
        return 1 if 'shortcut' in tokens else 0
    if tokens & APPLE_TOUCH_RELS:
        return 2
    return None


def extract_favicon(soup: BeautifulSoup, base_url: str) -> str | None:
    """
    Find the page's icon URL.

    Looks for <link rel="icon">, then "shortcut icon", then "apple-touch-icon",
    resolving relative hrefs against `base_url`. Rel values are matched per token,
    so "icon shortcut" and "apple-touch-icon-precomposed" are recognised. Falls
    back to /favicon.ico.
    """
    best_rank = None
    best_href = None
    for link in soup.find_all('link', href=True):
        rank = _favicon_rank(link)
        if rank is not None and (best_rank is None or rank < best_rank):
            best_rank = rank
            best_href = link['href'].strip()
    if best_href is not None:
        return urljoin(base_url, best_href)
    return default_favicon_url(base_url)


def extract_html_metadata(html: str, base_url: str) -> ExtractedMetadata:
    """
    Extract title, description and favicon from HTML.

    Pure function with no I/O. Uses BeautifulSoup for parsing.

    Title extraction priority:
    1. <title> tag
    2. <meta property="og:title">
    3. <meta name="twitter:title">

    Description extraction priority:
    1. <meta name="description">
    2. <meta property="og:description">
    3. <meta name="twitter:description">

    Args:
        html:
            Raw HTML string to parse.
        base_url:
            URL the HTML was served from; relative icon links resolve against it.

    Returns:
        ExtractedMetadata (title/description may be None if not found).
    """
    soup = BeautifulSoup(html, 'lxml')

    title = None
    title_tag = soup.find('title')
    if title_tag and title_tag.string:
        title = title_tag.string.strip() or None
    if not title:
        title = _meta_content(soup, property='og:title')
    if not title:
        title = _meta_content(soup, name='twitter:title')

    description = _meta_content(soup, name='description')
    if not description:
        description = _meta_content(soup, property='og:description')
    if not description:
        description = _meta_content(soup, name='twitter:description')

    return ExtractedMetadata(
        title=title,
        description=description,
        favicon=extract_favicon(soup, base_url),
    )


async def preview_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> PagePreview:  # noqa: ASYNC109
    """
    Fetch a URL and extract the metadata used to pre-fill a new bookmark.

    Never raises for network problems; the error is reported on the result. When
    the server answered, the favicon falls back to the origin's /favicon.ico. When
    no response was received (blocked, unresolvable or timed out) there is no
    favicon.
    """
    result = await fetch_url(url, timeout)

    if result.error or result.html is None:
        logger.warning("Failed to fetch URL %s: %s", url, result.error)
        return PagePreview(
            metadata=ExtractedMetadata(
                title=None,
                description=None,
                favicon=(
                    default_favicon_url(result.final_url)
                    if result.status_code is not None
                    else None
                ),
            ),
            final_url=result.final_url,
            error=result.error,
        )

    return PagePreview(
        metadata=extract_html_metadata(result.html, result.final_url),
        final_url=result.final_url,
        error=None,
    )
