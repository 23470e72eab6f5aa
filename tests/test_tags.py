import base64

import pytest
from dkim.util import DuplicateTag, InvalidTagSpec

from dkim_prover.errors import (
    EncodingError,
    KeyResolutionError,
    MissingTagError,
    SignatureDecodeError,
    UnsupportedAlgorithmError,
)
from dkim_prover.message import header_value
from dkim_prover.tags import decode_signature, parse_dkim_tags, parse_tag_list


class TestParseTagList:

    def test_simple(self):
        assert parse_tag_list('v=1; d=example.com; s=sel') == {
            'v': '1', 'd': 'example.com', 's': 'sel'}

    def test_trailing_semicolon_and_folding(self):
        tags = parse_tag_list('v=1;\n\td=example.com;\n\ts=sel;\n')
        assert tags == {'v': '1', 'd': 'example.com', 's': 'sel'}

    def test_value_keeps_equal_signs(self):
        assert parse_tag_list('bh=abc==; b=x=')['bh'] == 'abc=='

    def test_empty_value(self):
        assert parse_tag_list('p=')['p'] == ''

    def test_segment_without_equal_sign(self):
        with pytest.raises(InvalidTagSpec):
            parse_tag_list('v=1; garbage; d=x')

    def test_bad_tag_name(self):
        with pytest.raises(InvalidTagSpec):
            parse_tag_list('1v=1')

    def test_duplicate_tag(self):
        with pytest.raises(DuplicateTag):
            parse_tag_list('d=a.com; s=x; d=b.com')


class TestDecodeSignature:

    def test_strips_folding_whitespace(self):
        encoded = base64.b64encode(b'\x01\x02\x03\xff' * 10).decode()
        folded = encoded[:10] + '\r\n\t' + encoded[10:20] + ' ' + encoded[20:]
        assert decode_signature(folded) == b'\x01\x02\x03\xff' * 10

    def test_invalid_base64(self):
        with pytest.raises(SignatureDecodeError):
            decode_signature('not*base64!')

    def test_bad_padding(self):
        with pytest.raises(SignatureDecodeError):
            decode_signature('abc')

    def test_empty(self):
        with pytest.raises(SignatureDecodeError):
            decode_signature(' \n\t')


class TestParseDkimTags:

    def test_sample_message(self, msg, signature):
        tags = parse_dkim_tags(header_value(msg, 'DKIM-Signature'))
        assert tags.selector == 'selector1'
        assert tags.domain == 'example.com'
        assert tags.signature == signature

    @pytest.mark.parametrize('value', [
        'v=1; a=rsa-sha256; s=sel; b=AAAA',
        'v=1; a=rsa-sha256; d=example.com; b=AAAA',
        'v=1; a=rsa-sha256; d=example.com; s=sel',
        'v=1; d=; s=sel; b=AAAA',
    ])
    def test_missing_tag(self, value):
        with pytest.raises(MissingTagError) as exc_info:
            parse_dkim_tags(value)
        assert isinstance(exc_info.value, EncodingError)
        assert isinstance(exc_info.value, KeyResolutionError)

    def test_malformed_tag_list(self):
        with pytest.raises(EncodingError):
            parse_dkim_tags('v=1; d=a.com; d=b.com; s=x; b=AAAA')

    def test_non_rsa_algorithm(self):
        with pytest.raises(UnsupportedAlgorithmError):
            parse_dkim_tags('v=1; a=ed25519-sha256; d=a.com; s=x; b=AAAA')

    def test_bad_signature(self):
        with pytest.raises(SignatureDecodeError):
            parse_dkim_tags('v=1; d=a.com; s=x; b=!!!!')
