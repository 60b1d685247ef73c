from django.conf import settings
from django.http import JsonResponse

SESSION_KEY = 'operator_authenticated'


def is_operator(request):
    return bool(request.session.get(SESSION_KEY))


class OperatorGateMiddleware:
    """Reject booking API requests without an operator session.

    The gate is open when OPERATOR_PASSWORD is not configured.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if (
            settings.OPERATOR_PASSWORD
            and request.path.startswith(settings.OPERATOR_PROTECTED_PREFIX)
            and not is_operator(request)
        ):
            return JsonResponse({'error': 'Authentication required'}, status=401)
        return self.get_response(request)
