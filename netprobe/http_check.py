"""
HTTP endpoint tester over httpx
"""

import logging
import ssl
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Optional, Union

import httpx

from .config import (
    DEFAULT_HTTP_TIMEOUT, HTTP_MAX_REDIRECTS, HTTP_MAX_BODY, HTTP_USER_AGENT,
    CERT_EXPIRY_WARNING_DAYS,
)
from .models import HTTPResult, HTTPMultiResult, TLSInfo


logger = logging.getLogger(__name__)

TLS_VERSIONS = {
    'TLSv1': 'TLS 1.0',
    'TLSv1.1': 'TLS 1.1',
    'TLSv1.2': 'TLS 1.2',
    'TLSv1.3': 'TLS 1.3',
}


def _name_attribute(name: tuple, attribute: str) -> Optional[str]:
    """Pull one attribute out of a getpeercert() subject/issuer tuple"""
    for rdn in name:
        for key, value in rdn:
            if key == attribute:
                return value
    return None


def tls_info_from_ssl(ssl_object, now: Optional[datetime] = None) -> TLSInfo:
    """
    Negotiated protocol, cipher and leaf certificate details.

    Certificate fields stay empty when verification is disabled, since
    the peer certificate is only decoded for verified connections.
    """
    info = TLSInfo()
    version = ssl_object.version()
    info.version = TLS_VERSIONS.get(version, version)
    cipher = ssl_object.cipher()
    if cipher:
        info.cipher_suite = cipher[0]

    cert = ssl_object.getpeercert()
    if not cert:
        return info

    info.certificate_info = [value for kind, value in cert.get('subjectAltName', ()) if kind == 'DNS']
    info.issuer = _name_attribute(cert.get('issuer', ()), 'commonName')

    not_after = cert.get('notAfter')
    if not_after:
        expires = datetime.fromtimestamp(ssl.cert_time_to_seconds(not_after), tz=timezone.utc)
        now = now or datetime.now(timezone.utc)
        info.valid_until = expires.strftime('%Y-%m-%dT%H:%M:%SZ')
        info.days_until_expiration = int((expires - now).total_seconds() // 86400)
        info.certificate_expiring = info.days_until_expiration < CERT_EXPIRY_WARNING_DAYS

    return info


class HTTPTester:
    """
    GET one or more URLs and report status, timing, headers and TLS.

    Each URL gets its own client so redirect history and connection
    state never leak between endpoints.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        follow_redirects: bool = True,
        insecure: bool = False,
        max_body: int = HTTP_MAX_BODY,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.insecure = insecure
        self.max_body = max_body
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
            max_redirects=HTTP_MAX_REDIRECTS,
            verify=not self.insecure,
            headers={'User-Agent': HTTP_USER_AGENT},
            transport=self.transport
        )

    def _read_body(self, response: httpx.Response) -> int:
        """Consume the body up to the cap, returning the byte count"""
        length = 0
        for chunk in response.iter_bytes():
            length += len(chunk)
            if length >= self.max_body:
                return self.max_body
        return length

    def _redirects(self, response: httpx.Response) -> list[str]:
        if response.history:
            return [str(r.url) for r in response.history[1:]] + [str(response.url)]
        if response.next_request is not None:
            return [str(response.next_request.url)]
        return []

    def test(self, url: str) -> HTTPResult:
        """
        GET a single URL.

        Returns:
            HTTPResult; transport failures land in error, never raise
        """
        result = HTTPResult(url=url)
        start = time.perf_counter()

        try:
            with self._client() as client:
                with client.stream('GET', url) as response:
                    result.response_time_ms = int((time.perf_counter() - start) * 1000)
                    result.status_code = response.status_code
                    for name, value in response.headers.raw:
                        result.headers.setdefault(name.decode('latin-1'), value.decode('latin-1'))
                    result.redirects = self._redirects(response)

                    stream = response.extensions.get('network_stream')
                    ssl_object = stream.get_extra_info('ssl_object') if stream else None
                    if ssl_object is not None:
                        result.tls_info = tls_info_from_ssl(ssl_object)

                    result.content_length = self._read_body(response)
        except httpx.TooManyRedirects:
            result.error = f"stopped after {HTTP_MAX_REDIRECTS} redirects"
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            result.error = str(e) or e.__class__.__name__

        if result.error:
            result.response_time_ms = result.response_time_ms or int((time.perf_counter() - start) * 1000)
            logger.debug("GET %s failed: %s", url, result.error)
        return result

    def test_many(self, urls: list[str]) -> HTTPMultiResult:
        """GET several URLs concurrently, results in input order"""
        start = time.perf_counter()
        with ThreadPoolExecutor(max_workers=max(1, len(urls)), thread_name_prefix="http") as pool:
            results = list(pool.map(self.test, urls))
        return HTTPMultiResult(
            results=results,
            total_time_ms=int((time.perf_counter() - start) * 1000)
        )

    def run(self, urls: list[str]) -> Union[HTTPResult, HTTPMultiResult]:
        if len(urls) == 1:
            return self.test(urls[0])
        return self.test_many(urls)
