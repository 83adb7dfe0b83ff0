# soapwire/wsse.py
"""
WS-Security UsernameToken headers.

This module generates the <wsse:Security> SOAP header defined by the OASIS
Web Services Security UsernameToken Profile 1.0. The header carries:

- a wsu:Timestamp with Created and Expires (five minutes later),
- a wsse:UsernameToken with the username, the password (plaintext or
  digested), the creation time and a random nonce.

Digest mode never sends the password itself. Instead it sends

    Base64( SHA-1( nonce + created + password ) )

where nonce is the raw random bytes (sent Base64 encoded in <wsse:Nonce>)
and created is the formatted creation timestamp.
"""

import base64
import hashlib
import logging
import secrets
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from jinja2 import Template

from soapwire.models import WsseCredentials
from soapwire.utils.datetime_utils import format_for_soap
from soapwire.utils.templating import get_template

logger: logging.Logger = logging.getLogger(__name__)

# Base address for the OASIS WSS 1.0 documents
WSS_BASE_ADDRESS: str = 'http://docs.oasis-open.org/wss/2004/01'

WSSE_NAMESPACE: str = f'{WSS_BASE_ADDRESS}/oasis-200401-wss-wssecurity-secext-1.0.xsd'
WSU_NAMESPACE: str = f'{WSS_BASE_ADDRESS}/oasis-200401-wss-wssecurity-utility-1.0.xsd'

# Values of the wsse:Password/@Type attribute
PASSWORD_TEXT_URI: str = (
    f'{WSS_BASE_ADDRESS}/oasis-200401-wss-username-token-profile-1.0#PasswordText'
)
PASSWORD_DIGEST_URI: str = (
    f'{WSS_BASE_ADDRESS}/oasis-200401-wss-username-token-profile-1.0#PasswordDigest'
)

NONCE_SIZE: int = 20
TIMESTAMP_LIFETIME: timedelta = timedelta(minutes=5)

WSSE_TEMPLATE_NAME: str = 'wsse_header.xml'


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _unique_id() -> str:
    return uuid.uuid4().hex


class SecurityHeaderGenerator:
    """
    Builds WS-Security UsernameToken header fragments.

    The generator holds no state between calls: every call to header()
    reads the clock and draws a fresh nonce, so a generator can be reused
    for any number of requests.

    Attributes:
        credentials: The resolved credentials (configuration defaults merged
                     with per-call values).

    Usage:
        >>> credentials = WsseCredentials(username='jo', password='secret', digest=True)
        >>> fragment = SecurityHeaderGenerator(credentials).header()
        >>> builder = EnvelopeBuilder(operation, body, security_header=fragment)
    """

    def __init__(
        self,
        credentials: WsseCredentials,
        *,
        clock: Callable[[], datetime] | None = None,
        random_bytes: Callable[[int], bytes] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            credentials: Username, password and digest flag.
            clock: Returns the current time. Defaults to datetime.now(UTC).
            random_bytes: Returns n cryptographically secure random bytes.
                          Defaults to secrets.token_bytes.
            id_factory: Returns a unique token for the wsu:Id attributes.
                        Defaults to a random UUID in hex form.
        """
        self.credentials: WsseCredentials = credentials
        self._clock: Callable[[], datetime] = clock or _utc_now
        self._random_bytes: Callable[[int], bytes] = random_bytes or secrets.token_bytes
        self._id_factory: Callable[[], str] = id_factory or _unique_id

    @property
    def password_type(self) -> str:
        """The URI for the wsse:Password/@Type attribute."""
        return PASSWORD_DIGEST_URI if self.credentials.use_digest else PASSWORD_TEXT_URI

    @staticmethod
    def password_digest(nonce: bytes, created: datetime, password: str) -> str:
        """
        Compute the PasswordDigest value.

        Args:
            nonce: The raw (not Base64 encoded) nonce bytes.
            created: The creation time sent in wsu:Created.
            password: The plaintext password.

        Returns:
            Base64( SHA-1( nonce + created + password ) )
        """
        token: bytes = nonce + format_for_soap(created).encode('utf-8') + password.encode('utf-8')
        return base64.b64encode(hashlib.sha1(token).digest()).decode('ascii')

    def header(self) -> str:
        """
        Render the <wsse:Security> header fragment.

        Returns:
            The XML fragment, or an empty string unless both username and
            password are set.
        """
        if not self.credentials.is_complete:
            return ''

        # The password is guaranteed to be set by is_complete
        password: str = self.credentials.password.get_secret_value()  # pyright: ignore[reportOptionalMemberAccess]

        created: datetime = self._clock()
        if created.tzinfo is None:
            created = created.replace(tzinfo=UTC)
        created = created.astimezone(UTC)
        expires: datetime = created + TIMESTAMP_LIFETIME
        secret: bytes = self._random_bytes(NONCE_SIZE)

        if self.credentials.use_digest:
            password_value: str = self.password_digest(secret, created, password)
        else:
            password_value = password

        template: Template = get_template(WSSE_TEMPLATE_NAME)
        fragment: str = template.render(
            wsse_namespace=WSSE_NAMESPACE,
            wsu_namespace=WSU_NAMESPACE,
            timestamp_id=self._id_factory(),
            token_id=self._id_factory(),
            created=format_for_soap(created),
            expires=format_for_soap(expires),
            username=self.credentials.username,
            password=password_value,
            password_type=self.password_type,
            nonce=base64.b64encode(secret).decode('ascii'),
        )

        logger.debug(
            'Built WSSE header for user %r (digest=%s)',
            self.credentials.username,
            self.credentials.use_digest,
        )
        return fragment
