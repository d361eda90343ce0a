import json
import logging
import math

from bson import ObjectId
from bson.errors import InvalidId
from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponseNotAllowed, JsonResponse, QueryDict
from django.http.multipartparser import MultiPartParser, MultiPartParserError
from django.utils.datastructures import MultiValueDict
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    default_message = "Server Error"

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request data."


class NotAuthenticated(ApiError):
    status_code = 401
    default_message = "Not authorized"


class PermissionDenied(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not Found"


class PaymentVerificationError(ApiError):
    status_code = 400
    default_message = "Payment verification failed"


class UpstreamError(ApiError):
    status_code = 500
    default_message = "Payment provider request failed"


class MongoJSONEncoder(DjangoJSONEncoder):
    def default(self, o):
        if isinstance(o, ObjectId):
            return str(o)
        return super().default(o)


def json_response(data, status=200):
    return JsonResponse(data, status=status, safe=False, encoder=MongoJSONEncoder)


def message_response(message, status=200, **extra):
    return json_response({"message": message, **extra}, status=status)


def form_data(request):
    """
    Returns (fields, files) of a form body. Django only parses forms for POST;
    PUT/PATCH forms (file uploads on update routes) are parsed here once and
    kept on the request.
    """
    if request.method not in ("PUT", "PATCH"):
        return request.POST, request.FILES
    if not hasattr(request, "update_form"):
        if request.content_type == "multipart/form-data":
            parser = MultiPartParser(request.META, request, request.upload_handlers, request.encoding)
            try:
                request.update_form = parser.parse()
            except MultiPartParserError:
                raise ValidationError("Invalid form data")
        elif request.content_type == "application/x-www-form-urlencoded":
            request.update_form = (QueryDict(request.body, encoding=request.encoding), MultiValueDict())
        else:
            request.update_form = (QueryDict(), MultiValueDict())
    return request.update_form


def read_payload(request):
    """
    Returns the request body as a dict, whether it was sent as JSON or as a
    (multipart) form.
    """
    if request.content_type == "application/json":
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except json.JSONDecodeError:
            raise ValidationError("Invalid JSON")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data
    fields, _ = form_data(request)
    return fields.dict()


def parse_object_id(value, message="Invalid ID format"):
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ValidationError(message)


def lookup_object_id(value, message="Not Found"):
    """Like parse_object_id, but a malformed id simply means the record does not exist."""
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise NotFound(message)


def to_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def to_float(value, default=None):
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid number: {value}")


def to_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).lower() == "true"


def split_csv(value):
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value or "").split(",") if part.strip()]


MAX_PAGE_SIZE = 100


def pagination(params, page_param="page", default_size=12):
    page = max(to_int(params.get(page_param), 1), 1)
    size = min(max(to_int(params.get("limit"), default_size), 1), MAX_PAGE_SIZE)
    return page, size


def page_count(total, page_size):
    return math.ceil(total / page_size) if page_size else 0


def methods(**handlers):
    """
    Builds a single view for one URL that dispatches on the HTTP verb, e.g.
    ``methods(GET=list_products, POST=create_product)``.
    """
    allowed = [verb.upper() for verb in handlers]

    @csrf_exempt
    def view(request, *args, **kwargs):
        handler = handlers.get(request.method)
        if handler is None:
            return HttpResponseNotAllowed(allowed)
        return handler(request, *args, **kwargs)

    return view
