from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase

from traction_rec.middleware import RequestContextMiddleware, is_batch_context


class RequestContextMiddlewareTests(SimpleTestCase):
    def test_batch_context_outside_requests(self):
        self.assertTrue(is_batch_context())

    def test_not_batch_context_while_serving_request(self):
        seen = []

        def get_response(request):
            seen.append(is_batch_context())
            return HttpResponse("ok")

        middleware = RequestContextMiddleware(get_response)
        response = middleware(RequestFactory().get("/"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(seen, [False])
        self.assertTrue(is_batch_context())

    def test_context_reset_when_view_raises(self):
        def get_response(request):
            raise RuntimeError("view failed")

        middleware = RequestContextMiddleware(get_response)
        with self.assertRaises(RuntimeError):
            middleware(RequestFactory().get("/"))

        self.assertTrue(is_batch_context())
