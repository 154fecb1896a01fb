from flask import Blueprint, redirect, render_template, url_for

from storefront.auth import admin_page_required, clear_admin_cookie, is_admin_authenticated

admin = Blueprint("admin", __name__, url_prefix="/admin")


# -----------------------------
# ADMIN LOGIN / LOGOUT
# -----------------------------
@admin.route("/login")
def admin_login():
    if is_admin_authenticated():
        return redirect(url_for("admin.admin_dashboard"))
    return render_template("admin/login.html")


@admin.route("/logout")
def admin_logout():
    return clear_admin_cookie(redirect(url_for("admin.admin_login")))


# -----------------------------
# DASHBOARD
# -----------------------------
@admin.route("")
@admin_page_required
def admin_dashboard():
    # products and chats are fetched client-side from the JSON API
    return render_template("admin/dashboard.html")
