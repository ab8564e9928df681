from functools import wraps

from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse


ADMIN_GROUP = "Admin"
MEMBER_GROUP = "Member"


def user_in_group(user, group_name):
    return user.is_authenticated and user.groups.filter(name=group_name).exists()


def user_in_any_group(user, group_names):
    return user.is_authenticated and user.groups.filter(name__in=group_names).exists()


def is_admin_user(user):
    return user.is_authenticated and (user.is_superuser or user_in_group(user, ADMIN_GROUP))


def role_required(*group_names):
    def decorator(view_func):
        @login_required
        @wraps(view_func)
        def wrapped(request, *args, **kwargs):
            if request.user.is_superuser or user_in_any_group(request.user, group_names):
                return view_func(request, *args, **kwargs)
            raise PermissionDenied

        return wrapped

    return decorator


admin_required = role_required(ADMIN_GROUP)


def admin_api_required(view_func):
    """Guard for JSON endpoints: anonymous and non-admin callers get a 401 payload."""

    @wraps(view_func)
    def wrapped(request, *args, **kwargs):
        if not is_admin_user(request.user):
            return JsonResponse({"error": "UNAUTHORIZED"}, status=401)
        return view_func(request, *args, **kwargs)

    return wrapped


def login_required_api(view_func):
    @wraps(view_func)
    def wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"error": "UNAUTHORIZED"}, status=401)
        return view_func(request, *args, **kwargs)

    return wrapped
