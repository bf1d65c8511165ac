from contextvars import ContextVar

_serving_request = ContextVar("traction_rec_serving_request", default=False)


def is_batch_context():
    """
    Return True unless the current context is serving a web request.

    Management commands, Celery workers and beat never pass through
    ``RequestContextMiddleware`` so they always count as batch contexts.
    """
    return not _serving_request.get()


class RequestContextMiddleware:
    """
    Marks the current context as serving a web request for the duration of
    the request so that batch-only maintenance work can refuse to run.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        token = _serving_request.set(True)
        try:
            return self.get_response(request)
        finally:
            _serving_request.reset(token)
