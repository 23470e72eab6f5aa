"""
DKIM tag-list parsing (RFC 6376 3.2) for the DKIM-Signature header and the
DNS key record.
"""
import base64
import binascii
import logging
import re

from dkim.util import DuplicateTag, InvalidTagSpec, InvalidTagValueList

from dkim_prover.errors import (
    EncodingError,
    MissingTagError,
    SignatureDecodeError,
    UnsupportedAlgorithmError,
)
from dkim_prover.types import DkimTags

logger = logging.getLogger(__name__)

TAG_NAME = re.compile(r'[A-Za-z][A-Za-z0-9_]*$')
WHITESPACE = re.compile(r'[ \t\r\n]+')

RSA_ALGORITHMS = ('rsa-sha256', 'rsa-sha1')


def parse_tag_list(value: str) -> dict:
    """ Split a tag-list into a dict.

    Segments are separated by ';', the tag name is everything before the
    first '='. A trailing ';' is valid. A tag may appear only once.

    >>> parse_tag_list('v=1; d=example.com; s=sel;')
    {'v': '1', 'd': 'example.com', 's': 'sel'}

    @param value: str
    @return: dict
    @raise InvalidTagSpec: segment without '=' or bad tag name
    @raise DuplicateTag: tag repeated
    """
    tags = {}
    for tag_spec in value.split(';'):
        if not tag_spec.strip():
            continue
        try:
            key, tag_value = [x.strip() for x in tag_spec.split('=', 1)]
        except ValueError:
            raise InvalidTagSpec(tag_spec)
        if TAG_NAME.match(key) is None:
            raise InvalidTagSpec(tag_spec)
        if key in tags:
            raise DuplicateTag(key)
        tags[key] = tag_value
    return tags


def decode_signature(b_value: str) -> bytes:
    """ Base64 decode the b= tag value after dropping all folding whitespace.

    @raise SignatureDecodeError: empty or malformed base64
    """
    cleaned = WHITESPACE.sub('', b_value)
    if not cleaned:
        raise SignatureDecodeError("b= value is empty")
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SignatureDecodeError("b= value is not valid base64 (%s)" % cleaned) from e


def parse_dkim_tags(dkim_signature: str) -> DkimTags:
    """ Selector, domain and signature bytes of a DKIM-Signature value.

    @param dkim_signature: str
        raw header value, folding included
    @return: DkimTags
    @raise MissingTagError: s=, d= or b= absent
    """
    try:
        tags = parse_tag_list(dkim_signature)
    except InvalidTagValueList as e:
        raise EncodingError("malformed DKIM-Signature tag list: %s" % e) from e

    algorithm = tags.get('a')
    if algorithm is not None and algorithm.lower() not in RSA_ALGORITHMS:
        raise UnsupportedAlgorithmError("unsupported signature algorithm: %s" % algorithm)

    for field in ('s', 'd', 'b'):
        if not tags.get(field):
            raise MissingTagError("DKIM-Signature missing %s=" % field)

    signature = decode_signature(tags['b'])
    logger.debug("s=%s d=%s, signature is %d bytes", tags['s'], tags['d'], len(signature))
    return DkimTags(selector=tags['s'], domain=tags['d'], signature=signature)
