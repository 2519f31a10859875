# core/tests/test_results.py
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase
from rest_framework import status

from core.results import ErrorCode, failure, http_status_for, is_authenticated, parse_id


class ResultHelpersTest(SimpleTestCase):

    def test_failure_shape(self):
        self.assertEqual(
            failure(ErrorCode.NOT_FOUND, 'Gone'),
            {'success': False, 'error': 'Gone', 'code': 'not_found'},
        )

    def test_http_status_mapping(self):
        self.assertEqual(http_status_for(failure(ErrorCode.UNAUTHORIZED, '')), status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(http_status_for(failure(ErrorCode.FORBIDDEN, '')), status.HTTP_403_FORBIDDEN)
        self.assertEqual(http_status_for(failure(ErrorCode.NOT_FOUND, '')), status.HTTP_404_NOT_FOUND)
        self.assertEqual(http_status_for(failure(ErrorCode.VALIDATION, '')), status.HTTP_400_BAD_REQUEST)
        self.assertEqual(http_status_for({'success': False}), status.HTTP_400_BAD_REQUEST)

    def test_is_authenticated(self):
        self.assertFalse(is_authenticated(None))
        self.assertFalse(is_authenticated(AnonymousUser()))
        self.assertFalse(is_authenticated(object()))

    def test_parse_id(self):
        self.assertEqual(parse_id('42'), 42)
        self.assertEqual(parse_id(' 7 '), 7)
        self.assertEqual(parse_id(3), 3)

    def test_parse_id_rejects_non_ids(self):
        for value in [None, True, '', 'abc', '4.2', '²', '١٢']:
            self.assertIsNone(parse_id(value), repr(value))
