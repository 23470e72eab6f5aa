"""
Relaxed header canonicalization of the signed header block.

The circuit hashes exactly these headers, in this order, so the selection is
fixed rather than read from the h= tag.
"""
import logging

from dkim_prover.errors import EncodingError
from dkim_prover.message import header_value
from dkim_prover.types import PaddedField

logger = logging.getLogger(__name__)

# h=To:From:Subject:Date:Message-Id:Content-Type:MIME-Version
SIGNED_HEADERS = (
    'to', 'from', 'subject', 'date', 'message-id', 'content-type',
    'mime-version', 'dkim-signature',
)

UNFOLDED_BTAG = '; b='
FOLDED_BTAG = ';\n\tb='
FOLD = '\n\t'

MAX_HEADER_LENGTH = 1024


def unfold(value: str) -> str:
    """Collapse every fold (newline + tab) into a single space."""
    return value.replace(FOLD, ' ')


def strip_signature(dkim_signature: str) -> str:
    """ Cut the DKIM-Signature value right after its "b=" tag name.

    Both the unfolded "; b=" and the folded ";\\n\\tb=" delimiters are looked
    up; the one that starts first wins.

    >>> strip_signature('v=1; d=a.com; b=AbC=')
    'v=1; d=a.com; b='
    >>> strip_signature('v=1; d=a.com;\\n\\tb=AbC=')
    'v=1; d=a.com;\\n\\tb='

    @raise EncodingError: no b= tag found
    """
    found = []
    for delimiter in (UNFOLDED_BTAG, FOLDED_BTAG):
        index = dkim_signature.find(delimiter)
        if index != -1:
            found.append((index, delimiter))
    if not found:
        raise EncodingError("no b= tag found in the DKIM-Signature header")
    index, delimiter = min(found)
    return dkim_signature[:index + len(delimiter)]


def relaxed_headers(msg):
    """ The signed headers as (lower-case name, value) pairs.

    @param msg: email.message.Message
    @return: list of (str, str)
    @raise MissingHeaderError: one of SIGNED_HEADERS is absent
    """
    headers = []
    for name in SIGNED_HEADERS:
        value = header_value(msg, name)
        if name == 'dkim-signature':
            value = strip_signature(value)
        headers.append((name, value))
    return headers


def to_signed_headers(headers) -> bytes:
    header_str = '\r\n'.join('%s:%s' % (name, value) for name, value in headers)
    return unfold(header_str).encode('utf-8')


def canonical_header(msg, capacity: int = MAX_HEADER_LENGTH) -> PaddedField:
    """ Build the zero padded canonical header buffer.

    @param msg: email.message.Message
    @param capacity: int
        size of the buffer handed to the circuit
    @return: PaddedField
        buffer and true (unpadded) length
    @raise EncodingError: a header is missing or the block exceeds capacity
    """
    header = to_signed_headers(relaxed_headers(msg))
    logger.debug("canonical header is %d bytes (capacity %d)", len(header), capacity)
    return PaddedField.from_bytes(header, capacity, 'canonical header')
