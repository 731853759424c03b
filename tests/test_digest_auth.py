import hashlib
import re
import unittest

from buildbot_connect import digest_auth
from buildbot_connect.exceptions import MalformedChallenge
from buildbot_connect.exceptions import UnsupportedAuthMode

RFC_CHALLENGE = ('Digest realm="testrealm@host.com", qop="auth,auth-int", '
                 'nonce="dcd98b7102dd2f0e8b11d0f600bfb0c093", '
                 'opaque="5ccc069c403ebaf9f0171e9517f40e41"')


def md5(text):
    return hashlib.md5(text.encode('utf-8')).hexdigest()


class DigestResponseTest(unittest.TestCase):

    def test_rfc2617_example(self):
        challenge = digest_auth.parse_challenge(RFC_CHALLENGE)

        response = digest_auth.digest_response(
            challenge, 'Mufasa', 'Circle Of Life', 'GET', '/dir/index.html',
            '00000001', '0a4f113b')

        self.assertEqual(response, '6629fae49393a05397450978507c4ef1')


class ComputeAuthTest(unittest.TestCase):

    def setUp(self):
        self.counter = digest_auth.NonceCounter()

    def test_rfc2617_header(self):
        header = digest_auth.compute_auth(
            RFC_CHALLENGE, 'Mufasa', 'Circle Of Life', method='GET',
            url='http://www.nowhere.org/dir/index.html',
            counter=self.counter, cnonce='0a4f113b')

        self.assertEqual(
            header,
            'Digest username="Mufasa",realm="testrealm@host.com",'
            'nonce="dcd98b7102dd2f0e8b11d0f600bfb0c093",'
            'uri="/dir/index.html",'
            'opaque="5ccc069c403ebaf9f0171e9517f40e41",qop="auth",'
            'algorithm="MD5",response="6629fae49393a05397450978507c4ef1",'
            'nc=00000001,cnonce="0a4f113b"')

    def test_basic(self):
        for method in ('GET', 'POST'):
            header = digest_auth.compute_auth(
                'Basic realm="buildbot"', 'alice', 'secret', method=method,
                counter=self.counter)
            self.assertEqual(header, 'Basic YWxpY2U6c2VjcmV0')
        self.assertEqual(self.counter.value, 0)

    def test_missing_header(self):
        with self.assertRaises(MalformedChallenge) as context_manager:
            digest_auth.compute_auth(None, 'alice', 'secret')
        self.assertEqual(str(context_manager.exception),
                         'Cannot authenticate: bad HTTP header')

    def test_short_header(self):
        with self.assertRaises(MalformedChallenge):
            digest_auth.compute_auth('Dig', 'alice', 'secret')

    def test_blank_header(self):
        with self.assertRaises(MalformedChallenge):
            digest_auth.compute_auth('      ', 'alice', 'secret')

    def test_auth_int_only(self):
        with self.assertRaises(UnsupportedAuthMode):
            digest_auth.compute_auth(
                'Digest realm="r", nonce="n", qop="auth-int"',
                'alice', 'secret', counter=self.counter)

    def test_auth_preferred_over_auth_int(self):
        header = digest_auth.compute_auth(
            'Digest realm="r", nonce="n", qop="auth-int,auth"',
            'alice', 'secret', counter=self.counter, cnonce='abc')
        self.assertIn('qop="auth",', header)

    def test_without_qop(self):
        header = digest_auth.compute_auth(
            'Digest realm="r", nonce="n1"', 'alice', 'secret',
            url='https://ci.example.com/api/v2/builders',
            counter=self.counter, cnonce='abc')

        expected = md5('%s:n1:%s' % (md5('alice:r:secret'),
                                     md5('GET:/api/v2/builders')))
        self.assertNotIn('qop=', header)
        self.assertNotIn('opaque=', header)
        self.assertIn('response="%s"' % expected, header)

    def test_method_in_digest(self):
        get = digest_auth.compute_auth(
            RFC_CHALLENGE, 'alice', 'secret', method='GET',
            counter=digest_auth.NonceCounter(), cnonce='abc')
        post = digest_auth.compute_auth(
            RFC_CHALLENGE, 'alice', 'secret', method='POST',
            counter=digest_auth.NonceCounter(), cnonce='abc')
        self.assertNotEqual(get, post)

    def test_fresh_cnonce_and_counter(self):
        first = digest_auth.compute_auth(
            RFC_CHALLENGE, 'alice', 'secret', counter=self.counter)
        second = digest_auth.compute_auth(
            RFC_CHALLENGE, 'alice', 'secret', counter=self.counter)

        self.assertIn(',nc=00000001,', first)
        self.assertIn(',nc=00000002,', second)
        cnonces = [re.search(r'cnonce="([0-9a-f]+)"', h).group(1)
                   for h in (first, second)]
        self.assertNotEqual(cnonces[0], cnonces[1])

    def test_default_counter_is_shared(self):
        before = digest_auth.NONCE_COUNTER.value
        digest_auth.compute_auth(RFC_CHALLENGE, 'alice', 'secret')
        digest_auth.compute_auth(RFC_CHALLENGE, 'bob', 'other')
        self.assertEqual(digest_auth.NONCE_COUNTER.value, before + 2)


class ParseChallengeTest(unittest.TestCase):

    def test_quoted(self):
        challenge = digest_auth.parse_challenge(RFC_CHALLENGE)
        self.assertEqual(challenge, digest_auth.Challenge(
            scheme='Digest', realm='testrealm@host.com',
            nonce='dcd98b7102dd2f0e8b11d0f600bfb0c093',
            opaque='5ccc069c403ebaf9f0171e9517f40e41', qop='auth'))

    def test_unquoted(self):
        challenge = digest_auth.parse_challenge(
            'Digest realm=buildbot, nonce=abc123, qop=auth')
        self.assertEqual(challenge.realm, 'buildbot')
        self.assertEqual(challenge.nonce, 'abc123')
        self.assertEqual(challenge.qop, 'auth')
        self.assertIsNone(challenge.opaque)

    def test_unquoted_value_ends_at_comma(self):
        challenge = digest_auth.parse_challenge(
            'Digest nonce=ab,cd, realm="r"')
        self.assertEqual(challenge.nonce, 'ab')

    def test_case_insensitive_keys(self):
        challenge = digest_auth.parse_challenge(
            'Digest REALM="r", Nonce="n"')
        self.assertEqual(challenge.realm, 'r')
        self.assertEqual(challenge.nonce, 'n')

    def test_nonce_not_taken_from_cnonce(self):
        challenge = digest_auth.parse_challenge(
            'Digest realm="r", cnonce="zzz", nonce="n1"')
        self.assertEqual(challenge.nonce, 'n1')

    def test_realm_keeps_spaces(self):
        challenge = digest_auth.parse_challenge(
            'Digest realm="Buildbot Server", nonce="n"')
        self.assertEqual(challenge.realm, 'Buildbot Server')

    def test_unknown_qop(self):
        challenge = digest_auth.parse_challenge(
            'Digest realm="r", nonce="n", qop="auth-conf"')
        self.assertIsNone(challenge.qop)


class DigestUriTest(unittest.TestCase):

    def test_path_and_query(self):
        self.assertEqual(
            digest_auth.digest_uri(
                'http://example.com:8010/api/v2/builders?limit=1'),
            '/api/v2/builders?limit=1')

    def test_no_path(self):
        self.assertEqual(digest_auth.digest_uri('http://example.com'), '/')

    def test_no_url(self):
        self.assertEqual(digest_auth.digest_uri(None), '/')


class NonceCounterTest(unittest.TestCase):

    def test_format(self):
        counter = digest_auth.NonceCounter()
        self.assertEqual(counter.value, 0)
        self.assertEqual(counter.next(), '00000001')
        self.assertEqual(counter.value, 1)

    def test_hex(self):
        counter = digest_auth.NonceCounter(start=9)
        self.assertEqual(counter.next(), '0000000a')

    def test_cnonce(self):
        cnonce = digest_auth.make_cnonce()
        self.assertTrue(re.match(r'^[0-9a-f]{32}$', cnonce))
