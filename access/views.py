import json
import logging

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .middleware import SESSION_KEY, is_operator

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["POST"])
def login(request):
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    password = data.get('password') if isinstance(data, dict) else None
    if not isinstance(password, str) or not password:
        return JsonResponse({'error': 'password required'}, status=400)

    if not settings.OPERATOR_PASSWORD or not constant_time_compare(password, settings.OPERATOR_PASSWORD):
        logger.warning("Rejected operator login from %s", request.META.get('REMOTE_ADDR'))
        return JsonResponse({'error': 'Incorrect password'}, status=401)

    request.session.cycle_key()
    request.session[SESSION_KEY] = True
    return JsonResponse({'authenticated': True})


@csrf_exempt
@require_http_methods(["POST"])
def logout(request):
    request.session.flush()
    return HttpResponse(status=204)


@require_http_methods(["GET"])
def session_status(request):
    return JsonResponse({
        'authenticated': is_operator(request),
        'gateEnabled': bool(settings.OPERATOR_PASSWORD),
    })
