"""Shared fixtures: a 2048 bit signing key, a signed sample email and a fake DNS."""
import base64

import pytest
from Crypto.Hash import SHA256
from Crypto.PublicKey import RSA
from Crypto.Signature import pkcs1_15

from dkim_prover.message import read_message

SELECTOR = 'selector1'
DOMAIN = 'example.com'


def fold_b64(value, width=64):
    """Fold a base64 value the way mailers fold the b= tag."""
    return '\r\n\t'.join(value[i:i + width] for i in range(0, len(value), width))


def make_eml(signature, to='"A" <a@b.com>', from_='"Jane Doe" <jane@example.com>',
             subject='hello', dkim_tags=None, drop=()):
    """ Build a raw RFC 5322 message (CRLF) with a folded DKIM-Signature.

    @param dkim_tags: replaces the tags in front of b= when given
    @param drop: lower-case header names to leave out
    """
    if dkim_tags is None:
        dkim_tags = ('v=1; a=rsa-sha256; c=relaxed/relaxed; d=%s;\r\n'
                     '\ts=%s; h=To:From:Subject:Date:Message-Id:Content-Type:MIME-Version;\r\n'
                     '\tbh=47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU=;' % (DOMAIN, SELECTOR))
    b64 = base64.b64encode(signature).decode('ascii')
    headers = [
        ('DKIM-Signature', dkim_tags + '\r\n\tb=' + fold_b64(b64)),
        ('From', from_),
        ('To', to),
        ('Subject', subject),
        ('Date', 'Mon, 1 Jan 2024 00:00:00 +0000'),
        ('Message-Id', '<123@example.com>'),
        ('Content-Type', 'text/plain; charset=us-ascii'),
        ('MIME-Version', '1.0'),
    ]
    lines = ['%s: %s' % (name, value) for name, value in headers if name.lower() not in drop]
    return ('\r\n'.join(lines) + '\r\n\r\nHello world\r\n').encode('utf-8')


@pytest.fixture(scope='session')
def rsa_key():
    return RSA.generate(2048)


@pytest.fixture(scope='session')
def small_rsa_key():
    return RSA.generate(1024)


@pytest.fixture(scope='session')
def signature(rsa_key):
    return pkcs1_15.new(rsa_key).sign(SHA256.new(b'to:a@b.com\r\nsubject:hello'))


@pytest.fixture(scope='session')
def dkim_record(rsa_key):
    p = base64.b64encode(rsa_key.public_key().export_key(format='DER')).decode('ascii')
    return 'v=DKIM1; k=rsa; p=%s' % p


@pytest.fixture
def fake_dns(dkim_record):
    """dnsfunc returning the test key; the queried names end up in .queries."""
    def dnsfunc(name):
        dnsfunc.queries.append(name)
        return dkim_record
    dnsfunc.queries = []
    return dnsfunc


@pytest.fixture
def eml_bytes(signature):
    return make_eml(signature)


@pytest.fixture
def msg(eml_bytes):
    return read_message(eml_bytes)
