"""ADFS identity provider client.

An ``IdentityProviderSession`` drives one browser-less login against an ADFS
server: it discovers the login form behind the IdP-initiated sign-on page,
posts the user's credentials to it and scrapes the base64 SAML assertion (or
the error ADFS shows instead) from the reply.
"""

import logging
import re
import threading
import warnings
from collections import namedtuple
from urllib.parse import urljoin, urlsplit

import requests
import urllib3

from adfs_aws.errors import AuthenticationError, DiscoveryError, ProtocolError, TransportError
from adfs_aws.scanner import HTML, TagHandler, scan

log = logging.getLogger(__name__)

IDP_ENTRY_PATH = "adfs/ls/IdpInitiatedSignOn.aspx?loginToRp=urn:amazon:webservices"
DEFAULT_TIMEOUT = 30  # seconds, per request

ERROR_ELEMENT_ID = "errorText"
ERROR_WINDOW = 300  # characters of raw markup read after the error element

_ERROR_TEXT = re.compile(r"(.*?)</", re.DOTALL)

LoginPage = namedtuple("LoginPage", ["assertion", "error_text"])


# ---------------------------------------------------------------------------
# Page scraping
# ---------------------------------------------------------------------------


class _LoginFormHandler(TagHandler):
    def __init__(self):
        self.action = None

    def on_open_tag(self, name, attrs, offset):
        if self.action is None and name == "form" and attrs.get("id") == "loginForm":
            self.action = attrs.get("action")


class _LoginResponseHandler(TagHandler):
    def __init__(self, html):
        self.html = html
        self.assertion = None
        self.error_text = None

    def on_open_tag(self, name, attrs, offset):
        if name == "input" and attrs.get("name") == "SAMLResponse":
            self.assertion = attrs.get("value")

        if attrs.get("id") == ERROR_ELEMENT_ID and offset is not None:
            text = extract_error_text(self.html, offset)
            if text:
                self.error_text = text


def extract_error_text(html, offset):
    """Scrape the message ADFS renders right after its error element.

    The message is not a clean attribute, so this reads a fixed window of raw
    markup after the element and cuts it at the first closing tag.
    """
    window = html[offset:offset + ERROR_WINDOW]
    match = _ERROR_TEXT.match(window)
    text = match.group(1) if match else window
    return text.strip()


def find_login_form(html):
    """Return the ``action`` of the ``loginForm`` form in *html*, or None."""
    handler = scan(html, _LoginFormHandler(), features=HTML)
    return handler.action


def scrape_login_response(html):
    """Return a ``LoginPage`` with whatever assertion/error *html* carries."""
    handler = scan(html, _LoginResponseHandler(html), features=HTML)
    return LoginPage(handler.assertion or None, handler.error_text or None)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class IdentityProviderSession:
    """State of one authentication attempt against an ADFS server.

    The HTTP session keeps the cookies ADFS sets on the sign-on page so they
    are replayed on the credential POST.  The assertion is cached once the
    login succeeds and never replaced afterwards.
    """

    def __init__(self, directory_domain, domain, timeout=DEFAULT_TIMEOUT, http=None):
        idp_entry_url = urljoin(directory_domain, IDP_ENTRY_PATH)
        parts = urlsplit(idp_entry_url)

        self.domain = domain
        self.base_domain = f"{parts.scheme}://{parts.netloc}"
        self.entry_path = f"{parts.path}?{parts.query}" if parts.query else parts.path
        self.timeout = timeout
        self.http = http or requests.Session()

        self._assertion = None
        self._assertion_lock = threading.Lock()

    @property
    def cached_assertion(self):
        return self._assertion

    def _cache_assertion(self, assertion):
        """Store *assertion* unless one is already cached; return the cached one."""
        with self._assertion_lock:
            if self._assertion is None:
                self._assertion = assertion
            return self._assertion

    def _request(self, method, url, **kwargs):
        """Send an unverified-TLS request, turning transport failures into TransportError."""
        log.debug("%s %s", method, url)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", urllib3.exceptions.InsecureRequestWarning)
            try:
                response = self.http.request(
                    method,
                    url,
                    verify=False,
                    allow_redirects=True,
                    timeout=self.timeout,
                    **kwargs,
                )
            except requests.RequestException as exc:
                raise TransportError(f"{method} {url} failed: {exc}") from exc

        log.debug("HTTP %s from %s (redirects: %s)",
                  response.status_code, response.url, [r.url for r in response.history])
        return response

    def get_login_path(self):
        """Fetch the sign-on page and return the login form's action path."""
        init_url = urljoin(self.base_domain, self.entry_path)
        try:
            response = self._request("GET", init_url)
        except TransportError as exc:
            raise DiscoveryError(f"Could not reach the identity provider: {exc}") from exc

        login_path = find_login_form(response.text)
        if not login_path:
            raise DiscoveryError(
                f"No login form found at {init_url} (HTTP {response.status_code}). "
                "Verify that 'directory_domain' points at the ADFS server."
            )

        log.debug("Login form action: %s", login_path)
        return login_path

    def login(self, login_path, username, password):
        """Post credentials to *login_path* and return the base64 SAML assertion.

        Once an assertion has been obtained it is returned again without
        contacting the IdP.
        """
        if self._assertion is not None:
            log.debug("Reusing cached SAML assertion")
            return self._assertion

        target_url = urljoin(self.base_domain, login_path)
        form = {
            "UserName": f"{self.domain}\\{username}",
            "Password": password,
            "AuthMethod": "",
            "Kmsi": "true",
        }
        response = self._request("POST", target_url, data=form)
        page = scrape_login_response(response.text)

        if page.error_text:
            raise AuthenticationError(page.error_text)
        if not page.assertion:
            raise ProtocolError(
                f"Unexpected response from identity provider (HTTP {response.status_code}): "
                "neither a SAMLResponse nor an error message was found."
            )

        return self._cache_assertion(page.assertion)
