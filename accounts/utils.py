from rest_framework.response import Response
from rest_framework import status as http_status


def success_response(message, data=None, status_code=http_status.HTTP_200_OK):
    payload = {"status": "success", "message": message}
    if data is not None:
        payload["data"] = data
    return Response(payload, status=status_code)


def error_response(message, code=None, errors=None, status_code=http_status.HTTP_400_BAD_REQUEST):
    """Error envelope; `code` is the machine-readable error kind."""
    payload = {"status": "error", "message": message}
    if code is not None:
        payload["code"] = code
    if errors is not None:
        payload["errors"] = errors
    return Response(payload, status=status_code)
