"""
Unit tests for the HTTP client pipeline
"""

import asyncio
import http.client
import threading
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
import requests
from requests.adapters import HTTPAdapter
from requests.cookies import extract_cookies_to_jar
from urllib3.response import HTTPResponse

from tiktok_sdk import (
    ClientConfig,
    TransportConfig,
    TikTokHttpClient,
    get_request_params,
    create_logging_interceptor,
)
from tiktok_sdk.exceptions import (
    ConfigurationError,
    DecodeError,
    SigningError,
    TransportError,
    ValidationError,
)


DEVICE_PARAMS = {'device_id': '6594726280552547846', 'iid': '6594726280552547847', 'openudid': 'b307b864b574e818'}


def sign_url(url, ts, device_id):
    return f"{url}&as=a1&cp=c1&mas=m1"


def make_response(status=200, body=b'{"status_code": 0}', url='https://api2.musical.ly/', set_cookies=(), headers=()):
    """Build a response the way the requests adapter does, with raw Set-Cookie headers"""
    raw_headers = list(headers) + [('Set-Cookie', value) for value in set_cookies]
    message = http.client.HTTPMessage()
    for name, value in raw_headers:
        message[name] = value

    raw = HTTPResponse(
        body=b'',
        headers=raw_headers,
        status=status,
        reason='OK' if status < 400 else 'Error',
        preload_content=False,
        original_response=SimpleNamespace(msg=message)
    )
    response = HTTPAdapter().build_response(requests.Request('GET', url).prepare(), raw)
    response._content = body
    return response


class FakeTransport:
    """Stands in for requests.Session.send and records prepared requests"""

    def __init__(self, *responses):
        self.responses = list(responses) or [make_response()]
        self.sent = []
        self.kwargs = []
        self._lock = threading.Lock()

    def __call__(self, prepared, **kwargs):
        with self._lock:
            self.sent.append(prepared)
            self.kwargs.append(kwargs)
            if len(self.responses) > 1:
                return self.responses.pop(0)
            return self.responses[0]


def make_client(*responses, signer=sign_url, **config_kwargs):
    config = ClientConfig(sign_url=signer, **config_kwargs)
    client = TikTokHttpClient(get_request_params(DEVICE_PARAMS), config)
    transport = FakeTransport(*responses)
    client.session.send = transport
    return client, transport


class TestClientConstruction:
    """Test configuration gate and defaults"""

    def test_missing_signer_fails_immediately(self):
        """No signer means no client, and no network activity"""
        with pytest.raises(ConfigurationError, match="sign_url"):
            ClientConfig()

    def test_non_callable_signer(self):
        with pytest.raises(ConfigurationError):
            ClientConfig(sign_url="https://signer.example")

    def test_missing_serializer(self):
        with pytest.raises(ConfigurationError, match="params_serializer"):
            ClientConfig(sign_url=sign_url, params_serializer=None)

    def test_missing_device_id(self):
        with pytest.raises(ConfigurationError, match="device_id"):
            TikTokHttpClient({'iid': '1'}, ClientConfig(sign_url=sign_url))

    def test_base_url_normalized(self):
        config = ClientConfig(sign_url=sign_url, base_url='https://api.example')
        assert config.base_url == 'https://api.example/'

    def test_invalid_base_url(self):
        with pytest.raises(ConfigurationError, match="Invalid base URL"):
            ClientConfig(sign_url=sign_url, base_url='not-a-url')

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError, match="Timeout"):
            TransportConfig(timeout=0)

    def test_transport_mapping_accepted(self):
        config = ClientConfig(sign_url=sign_url, transport={'timeout': 5.0})
        assert config.transport.timeout == 5.0

    def test_default_headers(self):
        client, _ = make_client()
        assert client.default_headers['host'] == 'api2.musical.ly'
        assert client.default_headers['user-agent'].startswith('com.zhiliaoapp.musically/2018080704')

    def test_header_precedence(self):
        """Transport header overrides beat built-in headers; config user agent beats computed one"""
        client, _ = make_client(
            user_agent='custom-agent',
            host='api.example',
            transport=TransportConfig(headers={'Accept-Encoding': 'identity'})
        )
        assert client.default_headers['user-agent'] == 'custom-agent'
        assert client.default_headers['host'] == 'api.example'
        assert client.default_headers['accept-encoding'] == 'identity'


class TestRequestPipeline:
    """Test signing, dispatch and decoding end to end"""

    def test_dispatches_signed_url_without_params(self):
        """The transport receives exactly the signed URL"""
        captured = {}

        def signer(url, ts, device_id):
            captured['url'] = url
            captured['device_id'] = device_id
            return 'https://api2.musical.ly/aweme/v1/user/?signed=yes'

        client, transport = make_client(signer=signer)
        asyncio.run(client.get('aweme/v1/user/', params={'user_id': '42'}))

        assert transport.sent[0].url == 'https://api2.musical.ly/aweme/v1/user/?signed=yes'
        assert captured['url'].startswith('https://api2.musical.ly/aweme/v1/user/?user_id=42&iid=')
        assert captured['device_id'] == DEVICE_PARAMS['device_id']

    def test_response_decoded_with_big_integers(self):
        client, _ = make_client(make_response(body=b'{"user": {"uid": 6554462345363161094, "follower_count": 10}}'))

        result = client.make_request('GET', 'aweme/v1/user/', params={'user_id': '6554462345363161094'})

        assert result == {'user': {'uid': '6554462345363161094', 'follower_count': 10}}

    def test_empty_body_passthrough(self):
        client, _ = make_client(make_response(body=b''))
        assert client.make_request('GET', 'aweme/v1/room/leave/') == b''

    def test_session_replay(self):
        """Cookies set by one response are sent with the next request"""
        client, transport = make_client(
            make_response(set_cookies=['session=abc; Path=/']),
            make_response()
        )

        client.make_request('POST', 'passport/user/login/')
        client.make_request('GET', 'aweme/v1/user/')

        assert 'Cookie' not in transport.sent[0].headers
        assert transport.sent[1].headers['Cookie'] == 'session=abc'

    def test_form_body_encoded(self):
        client, transport = make_client()

        client.make_request('POST', 'aweme/v1/comment/publish/', data={'text': 'hi there', 'aweme_id': '1'})

        prepared = transport.sent[0]
        assert prepared.body == 'aweme_id=1&text=hi%20there'
        assert prepared.headers['content-type'] == 'application/x-www-form-urlencoded'

    def test_per_call_headers_and_timeout(self):
        client, transport = make_client()

        client.make_request('GET', 'aweme/v1/feed/', headers={'User-Agent': 'per-call'}, timeout=3.0)

        assert transport.sent[0].headers['user-agent'] == 'per-call'
        assert transport.kwargs[0]['timeout'] == 3.0

    def test_default_timeout_from_transport_config(self):
        client, transport = make_client(transport=TransportConfig(timeout=12.5))
        client.make_request('GET', 'aweme/v1/feed/')
        assert transport.kwargs[0]['timeout'] == 12.5

    def test_unsupported_method(self):
        client, _ = make_client()
        with pytest.raises(ValidationError):
            client.make_request('DELETE', 'aweme/v1/user/')


class TestErrorPropagation:
    """Test that failures surface unchanged and nothing is retried"""

    def test_signing_failure_prevents_dispatch(self):
        def signer(url, ts, device_id):
            raise RuntimeError("no signature")

        client, transport = make_client(signer=signer)

        with pytest.raises(SigningError):
            client.make_request('GET', 'aweme/v1/user/')

        assert transport.sent == []
        assert client.get_signing_metrics().signing_failures == 1

    def test_http_error_status(self):
        client, transport = make_client(make_response(status=503, body=b'{"status_code": 9}'))

        with pytest.raises(TransportError) as exc_info:
            client.make_request('GET', 'aweme/v1/user/')

        assert exc_info.value.http_status == 503
        assert exc_info.value.details['body'] == {'status_code': 9}
        assert len(transport.sent) == 1

    def test_network_error(self):
        client, _ = make_client()
        client.session.send = Mock(side_effect=requests.exceptions.ConnectionError("refused"))

        with pytest.raises(TransportError) as exc_info:
            client.make_request('GET', 'aweme/v1/user/')

        assert exc_info.value.error_code == "CONNECTION_ERROR"
        assert client.session.send.call_count == 1

    def test_timeout_error(self):
        client, _ = make_client()
        client.session.send = Mock(side_effect=requests.exceptions.Timeout())

        with pytest.raises(TransportError) as exc_info:
            client.make_request('GET', 'aweme/v1/user/')

        assert exc_info.value.error_code == "TIMEOUT"

    def test_malformed_body(self):
        client, _ = make_client(make_response(body=b'{"status_code": '))

        with pytest.raises(DecodeError):
            client.make_request('GET', 'aweme/v1/user/')


class TestCookiesAndRedirects:
    """Test that every hop shares the client's single cookie store"""

    def test_expired_cookie_no_longer_sent(self):
        """A logout response that expires the session cookie stops its replay"""
        client, transport = make_client(
            make_response(set_cookies=['session=abc; Path=/']),
            make_response(set_cookies=['session=; Path=/; Max-Age=0']),
            make_response()
        )

        client.make_request('POST', 'passport/user/login/')
        client.make_request('GET', 'passport/user/logout/')
        client.make_request('GET', 'aweme/v1/user/')

        assert transport.sent[1].headers['Cookie'] == 'session=abc'
        assert 'Cookie' not in transport.sent[2].headers

    def test_redirect_cookies_ingested(self):
        """Set-Cookie on a redirect hop is stored and sent on the following hops"""
        client, transport = make_client(
            make_response(
                status=302,
                body=b'',
                set_cookies=['session=abc; Path=/'],
                headers=[('Location', 'https://api2.musical.ly/passport/user/login/done/')]
            ),
            make_response(body=b'{"status_code": 0, "data": {}}'),
            make_response()
        )

        result = client.make_request('POST', 'passport/user/login/', data={'mix_mode': 1})
        client.make_request('GET', 'aweme/v1/user/')

        assert result == {'status_code': 0, 'data': {}}
        redirected = transport.sent[1]
        assert redirected.url == 'https://api2.musical.ly/passport/user/login/done/'
        assert redirected.method == 'GET'
        assert redirected.body is None
        assert redirected.headers['Cookie'] == 'session=abc'
        assert transport.sent[2].headers['Cookie'] == 'session=abc'
        assert all(kwargs['allow_redirects'] is False for kwargs in transport.kwargs)

    def test_temporary_redirect_keeps_method_and_body(self):
        client, transport = make_client(
            make_response(status=307, body=b'', headers=[('Location', '/aweme/v1/comment/publish/v2/')]),
            make_response()
        )

        client.make_request('POST', 'aweme/v1/comment/publish/', data={'text': 'hi'})

        redirected = transport.sent[1]
        assert redirected.url == 'https://api2.musical.ly/aweme/v1/comment/publish/v2/'
        assert redirected.method == 'POST'
        assert redirected.body == 'text=hi'

    def test_cross_host_redirect_drops_host_header(self):
        client, transport = make_client(
            make_response(status=301, body=b'', headers=[('Location', 'https://api.example/aweme/v1/user/')]),
            make_response(url='https://api.example/aweme/v1/user/')
        )

        client.make_request('GET', 'aweme/v1/user/')

        assert transport.sent[0].headers['Host'] == 'api2.musical.ly'
        assert 'Host' not in transport.sent[1].headers

    def test_too_many_redirects(self):
        client, transport = make_client(
            make_response(status=302, body=b'', headers=[('Location', 'https://api2.musical.ly/loop/')])
        )
        client.session.max_redirects = 2

        with pytest.raises(TransportError) as exc_info:
            client.make_request('GET', 'aweme/v1/user/')

        assert exc_info.value.error_code == "TOO_MANY_REDIRECTS"
        assert len(transport.sent) == 3

    def test_transport_jar_refuses_cookies(self):
        """The requests session keeps no cookies of its own"""
        client, _ = make_client()
        response = make_response(set_cookies=['session=abc; Path=/'])

        extract_cookies_to_jar(client.session.cookies, response.request, response.raw)

        assert len(client.session.cookies) == 0


class TestInterceptors:
    """Test caller interceptors"""

    def test_request_interceptor_runs_before_signing(self):
        captured = {}

        def signer(url, ts, device_id):
            captured['url'] = url
            return url

        def add_param(request, context):
            request.params['extra_flag'] = '1'
            return request

        client, _ = make_client(signer=signer)
        client.add_request_interceptor(add_param)
        client.make_request('GET', 'aweme/v1/user/')

        assert 'extra_flag=1' in captured['url']

    def test_async_interceptors(self):
        seen = []

        async def on_request(request, context):
            seen.append(('request', request.path))
            return request

        async def on_response(response, context):
            seen.append(('response', response.status_code))
            return response

        client, _ = make_client()
        client.add_request_interceptor(on_request)
        client.add_response_interceptor(on_response)
        client.make_request('GET', 'aweme/v1/feed/')

        assert seen == [('request', 'aweme/v1/feed/'), ('response', 200)]

    def test_interceptor_errors_propagate(self):
        def broken(request, context):
            raise RuntimeError("interceptor failed")

        client, transport = make_client()
        client.add_request_interceptor(broken)

        with pytest.raises(RuntimeError, match="interceptor failed"):
            client.make_request('GET', 'aweme/v1/feed/')
        assert transport.sent == []

    def test_remove_interceptor(self):
        client, _ = make_client()
        request_interceptor, response_interceptor = create_logging_interceptor()
        client.add_request_interceptor(request_interceptor)
        client.add_response_interceptor(response_interceptor)

        assert client.remove_request_interceptor(request_interceptor) is True
        assert client.remove_response_interceptor(response_interceptor) is True
        assert client.remove_request_interceptor(request_interceptor) is False

    def test_logging_interceptor(self, caplog):
        client, _ = make_client()
        request_interceptor, response_interceptor = create_logging_interceptor(log_level='info')
        client.add_request_interceptor(request_interceptor)
        client.add_response_interceptor(response_interceptor)

        with caplog.at_level('INFO', logger='tiktok_sdk.http_client'):
            client.make_request('GET', 'aweme/v1/feed/')

        messages = [record.getMessage() for record in caplog.records]
        assert any(message.startswith('HTTP Request:') for message in messages)
        assert any(message.startswith('HTTP Response:') for message in messages)


class TestConcurrency:
    """Test concurrent requests from one client"""

    def test_concurrent_requests_share_session(self):
        responses = [make_response(set_cookies=[f'c{i}={i}; Path=/']) for i in range(5)]
        client, transport = make_client(*responses, make_response())

        async def run_all():
            await asyncio.gather(*(client.get('aweme/v1/feed/') for _ in range(5)))
            await client.get('aweme/v1/user/')

        asyncio.run(run_all())

        cookie_header = transport.sent[-1].headers['Cookie']
        assert sorted(cookie_header.split('; ')) == [f'c{i}={i}' for i in range(5)]

    def test_make_request_inside_running_loop(self):
        client, _ = make_client()

        async def call_sync_api():
            return client.make_request('GET', 'aweme/v1/feed/')

        assert asyncio.run(call_sync_api()) == {'status_code': 0}
