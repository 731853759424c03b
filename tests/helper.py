import json

from mock import Mock
import requests

DIGEST_CHALLENGE = ('Digest realm="buildbot", qop="auth", '
                    'nonce="dcd98b7102dd2f0e8b11d0f600bfb0c093", '
                    'opaque="5ccc069c403ebaf9f0171e9517f40e41"')


def build_response_mock(status_code, json_body=None, headers=None,
                        add_content_length=True, set_cookies=None,
                        **kwargs):
    response = requests.Response()
    response.status_code = status_code
    response._content = b''

    if json_body is not None:
        response._content = json.dumps(json_body).encode('utf-8')
        if add_content_length:
            response.headers['content-length'] = str(len(response._content))

    if headers is not None:
        for k, v in headers.items():
            response.headers[k] = v

    if set_cookies is not None:
        # repeated headers are only visible on the raw urllib3 response
        response.raw = Mock()
        response.raw.headers.getlist.return_value = list(set_cookies)
        response.headers['Set-Cookie'] = ', '.join(set_cookies)

    for k, v in kwargs.items():
        setattr(response, k, v)

    return response


def challenge_response(url, status_code=401, header=DIGEST_CHALLENGE):
    return build_response_mock(
        status_code, headers={'WWW-Authenticate': header}, url=url,
        reason='Unauthorized')
