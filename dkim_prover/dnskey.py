"""
DKIM public key retrieval: DNS TXT lookup, p= extraction, PEM reconstruction.
"""
import logging
import re
from functools import partial

import dns.exception
import dns.resolver
from Crypto.PublicKey import RSA
from dkim.util import InvalidTagValueList

from dkim_prover.errors import (
    DnsLookupError,
    KeyFormatError,
    KeyNotFoundError,
)
from dkim_prover.tags import parse_tag_list

logger = logging.getLogger(__name__)

PEM_HEADER = '-----BEGIN PUBLIC KEY-----'
PEM_FOOTER = '-----END PUBLIC KEY-----'
PEM_LINE_LENGTH = 64

WHITESPACE = re.compile(r'\s+')


def dkim_record_name(selector: str, domain: str) -> str:
    return "%s._domainkey.%s" % (selector, domain)


def make_resolver(nameservers=()):
    if nameservers:
        resolver = dns.resolver.Resolver(configure=False)
        resolver.nameservers = list(nameservers)
        return resolver
    return dns.resolver.Resolver()


def get_txt(name: str, timeout: float = 5.0, retries: int = 2, nameservers=(),
            resolver=None) -> str:
    """ Fetch the TXT record of name, all strings concatenated in order.

    A missing record fails at once. A timeout is retried at most `retries`
    times, each attempt bounded by `timeout` seconds.

    @param name: str
        DNS name to query, type TXT
    @return: str
        the record text
    @raise KeyNotFoundError: NXDOMAIN, no TXT answer, or an empty record
    @raise DnsLookupError: timeouts or transport errors
    """
    if resolver is None:
        try:
            resolver = make_resolver(nameservers)
        except dns.exception.DNSException as e:
            raise DnsLookupError("cannot configure DNS resolver: %s" % e) from e

    attempts = retries + 1
    for attempt in range(1, attempts + 1):
        try:
            answer = resolver.resolve(name, 'TXT', lifetime=timeout)
            break
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer) as e:
            raise KeyNotFoundError("no DKIM key record at %s" % name) from e
        except dns.exception.Timeout as e:
            if attempt == attempts:
                raise DnsLookupError(
                    "DNS lookup for %s timed out after %d attempt(s)" % (name, attempts)) from e
            logger.warning("DNS lookup for %s timed out (attempt %d/%d), retrying",
                           name, attempt, attempts)
        except dns.exception.DNSException as e:
            raise DnsLookupError("DNS lookup for %s failed: %s" % (name, e)) from e

    record = b''.join(part for rdata in answer for part in rdata.strings)
    if not record:
        raise KeyNotFoundError("empty DKIM key record at %s" % name)
    try:
        return record.decode('ascii')
    except UnicodeDecodeError as e:
        raise KeyFormatError("DKIM key record for %s is not ASCII" % name) from e


def extract_public_key(record: str) -> str:
    """ The base64 p= value of a DKIM key record.

    @raise KeyNotFoundError: no p= tag, or an empty (revoked) one
    @raise KeyFormatError: malformed record, wrong version or key type
    """
    try:
        tags = parse_tag_list(record)
    except InvalidTagValueList as e:
        raise KeyFormatError("malformed DKIM key record: %s" % e) from e

    # Version not required in key record: RFC 6376 3.6.1
    if tags.get('v', 'DKIM1') != 'DKIM1':
        raise KeyFormatError("DKIM bad version: %s" % tags['v'])
    if tags.get('k', 'rsa').lower() != 'rsa':
        raise KeyFormatError("unsupported key type: %s" % tags['k'])

    if 'p' not in tags:
        raise KeyNotFoundError("no public key found in DKIM record")
    public_key = WHITESPACE.sub('', tags['p'])
    if not public_key:
        raise KeyNotFoundError("DKIM public key has been revoked (empty p=)")
    return public_key


def format_pem(public_key: str) -> str:
    lines = [public_key[i:i + PEM_LINE_LENGTH]
             for i in range(0, len(public_key), PEM_LINE_LENGTH)]
    return '\n'.join([PEM_HEADER] + lines + [PEM_FOOTER])


def load_public_key(pem: str, bit_width: int = 2048) -> RSA.RsaKey:
    """ Parse a PEM public key block.

    Only 2048 bit moduli are known to work downstream; other sizes are let
    through with a warning.

    @raise KeyFormatError: not an RSA public key
    """
    try:
        key = RSA.import_key(pem)
    except (ValueError, IndexError, TypeError) as e:
        raise KeyFormatError("could not parse RSA public key: %s" % e) from e
    if key.has_private():
        key = key.public_key()
    if key.n.bit_length() != bit_width:
        logger.warning("RSA modulus is %d bits, expected %d",
                       key.n.bit_length(), bit_width)
    return key


def resolve_public_key(selector: str, domain: str, dnsfunc=None, bit_width: int = 2048,
                       timeout: float = 5.0, retries: int = 2, nameservers=()) -> RSA.RsaKey:
    """ Look up and rebuild the signer's RSA public key.

    @param selector: str
    @param domain: str
    @param dnsfunc: callable
        name -> TXT record text; defaults to get_txt with the given
        timeout/retries/nameservers
    @return: Crypto.PublicKey.RSA.RsaKey
    """
    if dnsfunc is None:
        dnsfunc = partial(get_txt, timeout=timeout, retries=retries, nameservers=nameservers)
    name = dkim_record_name(selector, domain)
    logger.info("querying DKIM key record %s", name)
    record = dnsfunc(name)
    if not record:
        raise KeyNotFoundError("missing public key: %s" % name)
    if isinstance(record, bytes):
        try:
            record = record.decode('ascii')
        except UnicodeDecodeError as e:
            raise KeyFormatError("DKIM key record for %s is not ASCII" % name) from e
    pem = format_pem(extract_public_key(record))
    return load_public_key(pem, bit_width)
