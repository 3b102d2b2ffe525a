"""
Test suite for configuration loading
"""

import base64
import io
import json
import logging

import pytest

from http_signatures import ConfigurationError, HttpMessage
from http_signatures.config import (
    ENV_ALGORITHM,
    ENV_KEY_ID,
    ENV_LOG_LEVEL,
    HttpSignaturesConfig,
    load_config_from_file,
    load_config_from_json,
    load_context_from_file,
)

DATE = 'Fri, 01 Aug 2014 13:44:32 -0700'


@pytest.fixture
def config_data():
    return {
        'keys': {'k1': 'secret', 'k2': 'other'},
        'signing': {'key_id': 'k1', 'headers': ['(request-target)', 'date']},
        'logging': {'level': 'info'},
    }


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (ENV_KEY_ID, ENV_ALGORITHM, ENV_LOG_LEVEL):
        monkeypatch.delenv(name, raising=False)


class TestConfigLoading:
    """Test loading configuration documents"""

    def test_from_dict(self, config_data):
        """Test a complete document"""
        config = HttpSignaturesConfig.from_dict(config_data, environ={})

        assert config.keys == {'k1': b'secret', 'k2': b'other'}
        assert config.signing.key_id == 'k1'
        assert config.signing.algorithm == 'hmac-sha256'
        assert config.logging.level == 'INFO'
        assert config.verification.require_digest is False

    def test_defaults(self):
        """Test an almost empty document"""
        config = HttpSignaturesConfig.from_dict({'keys': {'k1': 'secret'}}, environ={})

        assert config.signing.headers == ['(request-target)', 'host', 'date']
        assert config.logging.level == 'WARNING'

    def test_base64_keys(self):
        """Test binary secrets"""
        secret = b'\x00\xffbinary'
        data = {'key_encoding': 'base64', 'keys': {'k1': base64.b64encode(secret).decode()}}
        assert HttpSignaturesConfig.from_dict(data, environ={}).keys['k1'] == secret

    def test_from_json(self, config_data):
        """Test loading from a JSON string"""
        config = load_config_from_json(json.dumps(config_data))
        assert config.signing.key_id == 'k1'

    def test_from_file(self, config_data, tmp_path):
        """Test loading from a JSON file"""
        path = tmp_path / 'signatures.json'
        path.write_text(json.dumps(config_data))

        assert load_config_from_file(path).signing.key_id == 'k1'
        assert load_config_from_file(str(path)).keys['k2'] == b'other'


class TestEnvironmentOverrides:
    """Test environment variable overrides"""

    def test_overrides(self, config_data):
        """Test every supported variable"""
        environ = {ENV_KEY_ID: 'k2', ENV_ALGORITHM: 'hmac-sha512', ENV_LOG_LEVEL: 'debug'}
        config = HttpSignaturesConfig.from_dict(config_data, environ=environ)

        assert config.signing.key_id == 'k2'
        assert config.signing.algorithm == 'hmac-sha512'
        assert config.logging.level == 'DEBUG'

    def test_process_environment(self, config_data, monkeypatch):
        """Test os.environ is used by default"""
        monkeypatch.setenv(ENV_KEY_ID, 'k2')
        assert load_config_from_json(json.dumps(config_data)).signing.key_id == 'k2'

    def test_override_validated(self, config_data):
        """Test overrides go through validation"""
        with pytest.raises(ConfigurationError):
            HttpSignaturesConfig.from_dict(config_data, environ={ENV_KEY_ID: 'k3'})


class TestConfigValidation:
    """Test rejection of invalid documents"""

    @pytest.mark.parametrize('data', [
        [],
        {'keys': ['k1']},
        {'keys': {'k1': 42}},
        {'keys': {'k1': 'secret'}, 'key_encoding': 'hex'},
        {'keys': {'k1': '***'}, 'key_encoding': 'base64'},
        {'keys': {'k1': 'secret'}, 'signing': {'key_id': 'k2'}},
        {'keys': {'k1': 'secret'}, 'signing': {'algorithm': 'rsa-sha256'}},
        {'keys': {'k1': 'secret'}, 'signing': {'profile': 'paranoid'}},
        {'keys': {'k1': 'secret'}, 'signing': {'headers': []}},
        {'keys': {'k1': 'secret'}, 'signing': {'unknown_option': True}},
        {'keys': {'k1': 'secret'}, 'logging': {'level': 'LOUD'}},
    ])
    def test_invalid_documents(self, data):
        """Test each invalid document raises"""
        with pytest.raises(ConfigurationError):
            HttpSignaturesConfig.from_dict(data, environ={})

    def test_invalid_json(self):
        """Test unparseable JSON"""
        with pytest.raises(ConfigurationError):
            load_config_from_json('{not json')

    def test_missing_file(self, tmp_path):
        """Test a missing configuration file"""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_file(tmp_path / 'missing.json')
        assert 'missing.json' in exc_info.value.details['path']

    def test_invalid_digest_algorithm_reported_on_conversion(self):
        """Test signing settings validated when building the signing config"""
        config = HttpSignaturesConfig.from_dict(
            {'keys': {'k1': 'secret'}, 'signing': {'digest_algorithm': 'MD5'}}, environ={}
        )
        with pytest.raises(ConfigurationError):
            config.to_signing_config()


class TestContextFromConfig:
    """Test building contexts from configuration"""

    def test_to_context_signs_and_verifies(self, config_data):
        """Test the configured context round-trips"""
        context = HttpSignaturesConfig.from_dict(config_data, environ={}).to_context()
        message = HttpMessage('GET', '/items', [('Date', DATE)])

        signed = context.sign(message)

        assert context.verifier().is_valid(signed) is True

    def test_profile_overrides_headers(self):
        """Test a profile replaces the header settings"""
        data = {'keys': {'k1': 'secret'}, 'signing': {'profile': 'strict', 'headers': ['date']}}
        signing_config = HttpSignaturesConfig.from_dict(data, environ={}).to_signing_config()

        assert signing_config.headers == ('(request-target)', 'host', 'date', 'digest')
        assert signing_config.digest_algorithm == 'SHA-512'

    def test_load_context_from_file(self, config_data, tmp_path):
        """Test the file shortcut applies the log level"""
        path = tmp_path / 'signatures.json'
        path.write_text(json.dumps(config_data))

        context = load_context_from_file(path)

        assert context.config.key_id == 'k1'
        assert logging.getLogger('http_signatures').level == logging.INFO


class TestMiddlewareFromConfig:
    """Test building verification middleware from configuration"""

    @staticmethod
    def _app(environ, start_response):
        start_response('200 OK', [('Content-Type', 'text/plain')])
        return [b'ok']

    @staticmethod
    def _environ(signed):
        environ = {
            'REQUEST_METHOD': signed.method,
            'PATH_INFO': signed.request_target,
            'QUERY_STRING': '',
            'CONTENT_LENGTH': str(len(signed.body)),
            'wsgi.input': io.BytesIO(signed.body),
        }
        for name, value in signed.headers:
            environ['HTTP_' + name.upper().replace('-', '_')] = value
        return environ

    def test_middleware_config_carries_require_digest(self, config_data):
        """Test the verification section reaches the middleware settings"""
        config_data['verification'] = {'require_digest': True}
        config = HttpSignaturesConfig.from_dict(config_data, environ={})

        middleware_config = config.to_middleware_config(exempt_paths=['/health'])

        assert middleware_config.require_digest is True
        assert middleware_config.exempt_paths == ('/health',)

    def test_wrapped_app_enforces_digest(self, config_data):
        """Test a body not matching its Digest is rejected when required"""
        config_data['verification'] = {'require_digest': True}
        config = HttpSignaturesConfig.from_dict(config_data, environ={})
        signed = config.to_context().signer().sign_with_digest(
            HttpMessage('POST', '/items', [('Date', DATE)], b'payload')
        )
        statuses = []

        def start_response(status, headers):
            statuses.append(status)

        wrapped = config.wrap_wsgi_app(self._app)
        wrapped(self._environ(signed), start_response)
        wrapped(self._environ(signed.with_body(b'PAYLOAD')), start_response)

        assert statuses == ['200 OK', '401 Unauthorized']

    def test_digest_not_checked_by_default(self, config_data):
        """Test the Digest header is ignored unless required"""
        config = HttpSignaturesConfig.from_dict(config_data, environ={})
        signed = config.to_context().signer().sign_with_digest(
            HttpMessage('POST', '/items', [('Date', DATE)], b'payload')
        )
        statuses = []

        def start_response(status, headers):
            statuses.append(status)

        config.wrap_wsgi_app(self._app)(self._environ(signed.with_body(b'PAYLOAD')), start_response)

        assert statuses == ['200 OK']
