"""
Test suite for HMAC request signing

This module tests signature parameter parsing and formatting, canonical signing
string construction, and the signer.
"""

import base64

import pytest
from cryptography.hazmat.primitives import hashes

from http_signatures import (
    ErrorCodes,
    HttpMessage,
    Key,
    SignatureParameters,
    SignatureParseError,
    SignedHeaderNotFoundError,
    Signer,
    SigningError,
    SigningStringBuilder,
    build_signing_string,
    sign,
)
from http_signatures.crypto import DEFAULT_REGISTRY, hmac_function
from http_signatures.signing import (
    create_signature_parameters,
    format_authorization,
    format_parameters,
    parse,
    parse_authorization,
    parse_strict,
)

DATE = 'Fri, 01 Aug 2014 13:44:32 -0700'
DIGEST = 'SHA-256=h7gWacNDycTMI1vWH4Z3f3Wek1nNZS8px82bBQEEARI='
SIGNATURE_B64 = 'tcniMTUZOzRWCgKmLNAHag0CManFsj25ze9Skpk4q8c='
REFERENCE_HEADER = (
    'keyId="secret1",algorithm="hmac-sha256",'
    'headers="(request-target) date digest",'
    f'signature="{SIGNATURE_B64}"'
)


@pytest.fixture
def message():
    return HttpMessage(
        method='GET',
        request_target='/path?query=123',
        headers=[('Date', DATE), ('Digest', DIGEST)],
        body='Some body (though any body in a GET should be ignored)'
    )


class TestSignatureParameters:
    """Test Signature header parsing and formatting"""

    def test_parse_reference_header(self):
        """Test parsing a complete header"""
        params = parse(REFERENCE_HEADER)

        assert params.key_id == 'secret1'
        assert params.algorithm == 'hmac-sha256'
        assert params.header_names == ('(request-target)', 'date', 'digest')
        assert params.signature == base64.b64decode(SIGNATURE_B64)

    def test_format_is_inverse_of_parse(self):
        """Test formatting reproduces the parsed header"""
        assert format_parameters(parse(REFERENCE_HEADER)) == REFERENCE_HEADER

    def test_parse_allows_whitespace_between_parameters(self):
        """Test optional whitespace around separators"""
        spaced = REFERENCE_HEADER.replace('",', '", ')
        assert parse(spaced) == parse(REFERENCE_HEADER)

    def test_parse_lowercases_header_names(self):
        """Test signed header names are case-normalized"""
        params = parse(REFERENCE_HEADER.replace('date digest', 'Date DIGEST'))
        assert params.header_names == ('(request-target)', 'date', 'digest')

    def test_parse_ignores_unknown_parameters(self):
        """Test extra parameters do not prevent parsing"""
        params = parse(REFERENCE_HEADER + ',created="1402170695"')
        assert params is not None
        assert params.key_id == 'secret1'

    @pytest.mark.parametrize('header_value', [
        None,
        '',
        'nonsense',
        'keyId="aa",algorithm="bb"',
        'not="a",valid="signature"',
        'keyId="",algorithm="hmac-sha256",headers="date",signature="AAAA"',
        'keyId="k",algorithm="hmac-sha256",headers=" ",signature="AAAA"',
        'keyId="k",algorithm="hmac-sha256",headers="date",signature="not base64!"',
        'keyId=k,algorithm="hmac-sha256",headers="date",signature="AAAA"',
    ])
    def test_parse_rejects_invalid_headers(self, header_value):
        """Test lenient parsing yields None for unusable headers"""
        assert parse(header_value) is None

    def test_parse_strict_raises(self):
        """Test strict parsing reports missing parameters"""
        with pytest.raises(SignatureParseError) as exc_info:
            parse_strict('keyId="aa",algorithm="bb"')

        assert exc_info.value.error_code == ErrorCodes.INVALID_SIGNATURE_PARAMETERS
        assert exc_info.value.details['missing'] == ['headers', 'signature']

    def test_parse_authorization(self):
        """Test the Signature authorization scheme"""
        params = parse_authorization(f'Signature {REFERENCE_HEADER}')
        assert params == parse(REFERENCE_HEADER)
        assert format_authorization(params) == f'Signature {REFERENCE_HEADER}'

    def test_parse_authorization_other_scheme(self):
        """Test other authorization schemes are not parsed"""
        assert parse_authorization('Bearer abc') is None
        assert parse_authorization(REFERENCE_HEADER) is None
        assert parse_authorization(None) is None

    def test_signature_parameters_validation(self):
        """Test parameter object validation"""
        with pytest.raises(ValueError):
            SignatureParameters(key_id='', algorithm='hmac-sha256', header_names=('date',), signature=b'x')
        with pytest.raises(ValueError):
            SignatureParameters(key_id='k', algorithm='hmac-sha256', header_names=(), signature=b'x')


class TestSigningString:
    """Test canonical signing string construction"""

    def test_reference_signing_string(self, message):
        """Test the lines, their order and the missing trailing newline"""
        signing_string = build_signing_string(message, ['(request-target)', 'date', 'digest'])

        assert signing_string == (
            '(request-target): get /path?query=123\n'
            f'date: {DATE}\n'
            f'digest: {DIGEST}'
        )

    def test_header_order_follows_list(self, message):
        """Test lines follow the listed order rather than message order"""
        signing_string = build_signing_string(message, ['digest', 'date'])
        assert signing_string == f'digest: {DIGEST}\ndate: {DATE}'

    def test_header_names_are_lowercased(self, message):
        """Test mixed-case names produce lower-case lines"""
        assert SigningStringBuilder(message).build(['Date']) == f'date: {DATE}'

    def test_repeated_header_values_are_folded(self):
        """Test multiple values are joined with comma and space"""
        message = HttpMessage('GET', '/', [('X-Tag', 'a'), ('Date', DATE), ('x-tag', 'b')])
        assert build_signing_string(message, ['x-tag']) == 'x-tag: a, b'

    def test_request_target_is_verbatim(self):
        """Test the request target is not normalized"""
        message = HttpMessage('DELETE', '/a%2Fb/../c?x=1&x=2', [])
        assert build_signing_string(message, ['(request-target)']) == '(request-target): delete /a%2Fb/../c?x=1&x=2'

    def test_missing_header_raises(self, message):
        """Test a listed header absent from the message"""
        with pytest.raises(SignedHeaderNotFoundError) as exc_info:
            build_signing_string(message, ['(request-target)', 'host'])
        assert exc_info.value.header_name == 'host'


class TestHttpMessage:
    """Test the immutable message type"""

    def test_header_lookup_is_case_insensitive(self, message):
        """Test header lookup by any case"""
        assert message.get_header('DATE') == DATE
        assert message.has_header('digest')
        assert message.get_header('Host') is None

    def test_accepts_dict_headers_and_str_body(self):
        """Test convenience constructor inputs"""
        message = HttpMessage('POST', '/', {'Date': DATE}, 'body')
        assert message.headers == (('Date', DATE),)
        assert message.body == b'body'

    def test_with_header_replaces_all_values(self, message):
        """Test replacement drops every earlier value"""
        updated = message.with_added_header('date', 'other').with_header('Date', 'new')
        assert updated.get_header_values('Date') == ['new']
        assert message.get_header('Date') == DATE

    def test_empty_method_rejected(self):
        """Test constructor validation"""
        with pytest.raises(ValueError):
            HttpMessage('', '/')


class TestSigner:
    """Test the signer"""

    def test_sign_reference_message(self, message):
        """Test the reference signature is reproduced"""
        header = sign(message, Key('secret1', 'secret'), 'hmac-sha256', ['(request-target)', 'date', 'digest'])
        assert header == REFERENCE_HEADER

    def test_create_signature_parameters(self, message):
        """Test the raw parameters carry the MAC bytes"""
        params = create_signature_parameters(
            message, Key('secret1', 'secret'), 'hmac-sha256', ['(request-target)', 'Date', 'digest']
        )
        assert params.header_names == ('(request-target)', 'date', 'digest')
        assert base64.b64encode(params.signature).decode() == SIGNATURE_B64

    def test_sign_message_adds_signature_header(self, message):
        """Test the signed copy carries the Signature header"""
        signer = Signer(Key('secret1', 'secret'), 'hmac-sha256', ['(request-target)', 'date', 'digest'])
        signed = signer.sign_message(message)

        assert signed.get_header('Signature') == REFERENCE_HEADER
        assert not message.has_header('Signature')

    def test_authorize_uses_authorization_header(self, message):
        """Test the Authorization variant"""
        signer = Signer(Key('secret1', 'secret'), 'hmac-sha256', ['(request-target)', 'date', 'digest'])
        signed = signer.authorize(message)

        assert signed.get_header('Authorization') == f'Signature {REFERENCE_HEADER}'
        assert not signed.has_header('Signature')

    def test_sign_with_digest(self):
        """Test the Digest header is added and signed"""
        message = HttpMessage('POST', '/items', [('Date', DATE)], b'{"a": 1}')
        signer = Signer(Key('k1', 'secret'), 'hmac-sha256', ['(request-target)', 'date'])

        signed = signer.sign_with_digest(message)
        params = parse(signed.get_header('Signature'))

        assert signed.get_header('Digest').startswith('SHA-256=')
        assert params.header_names == ('(request-target)', 'date', 'digest')

    def test_authorize_with_digest(self):
        """Test the Digest header is added and signed in Authorization"""
        message = HttpMessage('POST', '/items', [('Date', DATE)], b'{}')
        signer = Signer(Key('k1', 'secret'), 'hmac-sha512', ['date'], digest_algorithm='SHA-512')

        signed = signer.authorize_with_digest(message)

        assert signed.get_header('Digest').startswith('SHA-512=')
        assert parse_authorization(signed.get_header('Authorization')).header_names == ('date', 'digest')

    def test_with_digest_header_signed_is_idempotent(self):
        """Test digest is not listed twice"""
        signer = Signer(Key('k1', 'secret'), 'hmac-sha256', ['date', 'digest'])
        assert signer.with_digest_header_signed() is signer

    def test_unknown_algorithm_rejected_at_construction(self):
        """Test unregistered algorithms fail early"""
        with pytest.raises(SigningError) as exc_info:
            Signer(Key('k1', 'secret'), 'hmac-md5', ['date'])
        assert exc_info.value.error_code == ErrorCodes.UNSUPPORTED_ALGORITHM

    def test_empty_header_list_rejected(self):
        """Test at least one header must be signed"""
        with pytest.raises(SigningError):
            Signer(Key('k1', 'secret'), 'hmac-sha256', [])

    def test_missing_header_fails_signing(self, message):
        """Test signing a header the message lacks"""
        signer = Signer(Key('k1', 'secret'), 'hmac-sha256', ['host'])
        with pytest.raises(SigningError) as exc_info:
            signer.sign(message)
        assert exc_info.value.error_code == ErrorCodes.SIGNED_HEADER_NOT_FOUND

    def test_sign_function_unknown_algorithm(self, message):
        """Test the functional form wraps algorithm errors"""
        with pytest.raises(SigningError):
            sign(message, Key('k1', 'secret'), 'rsa-sha256', ['date'])

    def test_quote_in_algorithm_rejected(self, message):
        """Test a registered algorithm name that cannot be formatted"""
        registry = DEFAULT_REGISTRY.extend(signing={'hmac"sha256': hmac_function(hashes.SHA256())})

        with pytest.raises(SigningError):
            Signer(Key('k1', 'secret'), 'hmac"sha256', ['date'], registry)
        with pytest.raises(SigningError):
            sign(message, Key('k1', 'secret'), 'hmac"sha256', ['date'], registry)

    def test_unknown_digest_algorithm_fails_add_digest(self, message):
        """Test an unregistered digest algorithm"""
        signer = Signer(Key('k1', 'secret'), 'hmac-sha256', ['date'], digest_algorithm='MD5')
        with pytest.raises(SigningError) as exc_info:
            signer.add_digest(message)
        assert exc_info.value.error_code == ErrorCodes.DIGEST_UNSUPPORTED_ALGORITHM
