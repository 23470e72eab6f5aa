"""
Access to the raw email.

Parsing is left to the stdlib email package with the compat32 policy, which
keeps header values exactly as they appear in the message, folds included.
"""
from email import policy
from email.message import Message
from email.parser import BytesParser

from dkim_prover.errors import EncodingError, MissingHeaderError, ProverIOError


def read_message(message_text: bytes) -> Message:
    return BytesParser(policy=policy.compat32).parsebytes(message_text)


def load_message(file) -> Message:
    try:
        with open(file, 'rb') as f:
            return BytesParser(policy=policy.compat32).parse(f)
    except OSError as e:
        raise ProverIOError("cannot read message %s: %s" % (file, e)) from e


def header_value(msg: Message, name: str) -> str:
    """ Raw value of the first header called name (case-insensitive).

    The value is read from the stored header, not through msg.get(), which
    replaces 8-bit bytes. Bytes outside ASCII are decoded as UTF-8.
    CRLF line endings are normalized to LF so that a folded line always reads
    as "\\n" followed by the continuation whitespace.

    @param msg: email.message.Message
    @param name: str
        header name, e.g. 'DKIM-Signature'
    @return: str
    @raise MissingHeaderError: no such header
    @raise EncodingError: the value is not valid UTF-8
    """
    for key, value in msg.raw_items():
        if key.lower() == name.lower():
            break
    else:
        raise MissingHeaderError("missing %s header" % name)
    try:
        value = str(value).encode('ascii', 'surrogateescape').decode('utf-8')
    except UnicodeError as e:
        raise EncodingError("%s header is not valid UTF-8" % name) from e
    return value.replace('\r\n', '\n')


def sender(msg: Message) -> str:
    return header_value(msg, 'From')


def recipient(msg: Message) -> str:
    return header_value(msg, 'To')


def subject(msg: Message) -> str:
    return header_value(msg, 'Subject')
