"""
Padded sender/recipient/subject buffers and their byte offsets in the
canonical header.

The circuit gets the From and To fields twice: once as the whole rendered
"from:..." / "to:..." text (from_seq, to_seq) and once as just the address
inside it (member_seq, relayer_seq).
"""
import logging
import re
from dataclasses import dataclass

from dkim_prover import message
from dkim_prover.canonicalize import unfold
from dkim_prover.errors import EncodingError, IndexingError
from dkim_prover.types import AddressStrategy, FieldOffset, PaddedField

logger = logging.getLogger(__name__)

MAX_EMAIL_ADDRESS_LENGTH = 124
MSG_HASH_LENGTH = 44  # base64 encoded sha256

EMAIL_ADDRESS = re.compile(
    r'(?:[\w.-]+@[\w.-]+\.\w+'
    r'|\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b)')


@dataclass(frozen=True)
class FieldLayout:
    sender: PaddedField
    recipient: PaddedField
    subject: PaddedField
    from_seq: FieldOffset
    member_seq: FieldOffset
    to_seq: FieldOffset
    relayer_seq: FieldOffset


def extract_addresses(text: str):
    return EMAIL_ADDRESS.findall(text)


def select_address(value: str, strategy=AddressStrategy.last_match):
    """ Pick the address out of a From/To value.

    With last_match the final address-shaped token wins, which is the
    bracketed one in '"Display Name" <addr>'.

    >>> select_address('"Jane Doe" <jane@example.com>')
    ('jane@example.com', 12)

    @param value: str
        rendered header value
    @param strategy: AddressStrategy
    @return: tuple (address, start offset in value)
    @raise EncodingError: no address found
    """
    strategy = AddressStrategy(strategy)
    if strategy is AddressStrategy.verbatim:
        return value, 0
    matches = list(EMAIL_ADDRESS.finditer(value))
    if not matches:
        raise EncodingError("no email address found in %r" % value)
    if len(matches) > 1:
        logger.debug("%d addresses in %r, using the last one", len(matches), value)
    last = matches[-1]
    return last.group(0), last.start()


def locate(header: bytes, needle: bytes) -> int:
    index = header.find(needle)
    if index == -1:
        raise IndexingError("%r not found in canonical header" % needle)
    return index


def locate_field(header: bytes, name: str, value: str) -> FieldOffset:
    """Offset of the rendered "name:value" text in header."""
    rendered = unfold('%s:%s' % (name, value)).encode('utf-8')
    return FieldOffset(locate(header, rendered), len(rendered))


def locate_address(header: bytes, field: FieldOffset, name: str, value: str,
                   address: str, start: int) -> FieldOffset:
    """ Offset of the selected address inside an already located field.

    When the value is only the address the two start together; otherwise the
    address start moves forward by the bytes of display name and bracket in
    front of it.
    """
    value_index = field.index + len(name) + 1
    index = value_index + len(value[:start].encode('utf-8'))
    address_bytes = address.encode('utf-8')
    if header[index:index + len(address_bytes)] != address_bytes:
        raise IndexingError("address %r not found at offset %d" % (address, index))
    return FieldOffset(index, len(address_bytes))


def pad_address(address: str, capacity: int = MAX_EMAIL_ADDRESS_LENGTH) -> PaddedField:
    return PaddedField.from_bytes(address.encode('utf-8'), capacity, 'email address')


def pad_subject(subject: str, capacity: int = MSG_HASH_LENGTH) -> PaddedField:
    return PaddedField.from_bytes(subject.encode('utf-8'), capacity, 'subject')


def _address_field(header, name, raw_value, capacity, strategy):
    value = unfold(raw_value)
    field = locate_field(header, name, value)
    address, start = select_address(value, strategy)
    padded = pad_address(address, capacity)
    return padded, field, locate_address(header, field, name, value, address, start)


def locate_fields(header: PaddedField, msg, email_capacity=MAX_EMAIL_ADDRESS_LENGTH,
                  subject_capacity=MSG_HASH_LENGTH,
                  strategy=AddressStrategy.last_match) -> FieldLayout:
    """ Build the padded address/subject buffers and their header offsets.

    @param header: PaddedField
        canonical header
    @param msg: email.message.Message
    @return: FieldLayout
    """
    sender, from_seq, member_seq = _address_field(
        header.data, 'from', message.sender(msg), email_capacity, strategy)
    recipient, to_seq, relayer_seq = _address_field(
        header.data, 'to', message.recipient(msg), email_capacity, strategy)
    subject = pad_subject(unfold(message.subject(msg)), subject_capacity)
    logger.debug("from_seq=%s member_seq=%s to_seq=%s relayer_seq=%s",
                 from_seq, member_seq, to_seq, relayer_seq)
    return FieldLayout(sender, recipient, subject, from_seq, member_seq, to_seq, relayer_seq)
