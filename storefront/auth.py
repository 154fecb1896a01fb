import hmac
from functools import wraps

from flask import current_app, redirect, request, url_for

from storefront.errors import Unauthorized

ADMIN_COOKIE_NAME = "admin_auth"


def check_password(candidate):
    expected = current_app.config["ADMIN_PASSWORD"] or ""
    return hmac.compare_digest((candidate or "").strip().encode(), expected.encode())


def is_admin_authenticated():
    return request.cookies.get(ADMIN_COOKIE_NAME) == "1"


def require_admin():
    if not is_admin_authenticated():
        raise Unauthorized()


def set_admin_cookie(response):
    response.set_cookie(
        ADMIN_COOKIE_NAME, "1", httponly=True, samesite="Lax", path="/"
    )
    return response


def clear_admin_cookie(response):
    response.set_cookie(
        ADMIN_COOKIE_NAME, "0", httponly=True, samesite="Lax", path="/", max_age=0
    )
    return response


# -----------------------------
# DECORATORS
# -----------------------------
def admin_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        require_admin()
        return view(*args, **kwargs)
    return wrapped


def admin_page_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not is_admin_authenticated():
            return redirect(url_for("admin.admin_login"))
        return view(*args, **kwargs)
    return wrapped
