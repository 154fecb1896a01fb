from flask import Blueprint, current_app, render_template, request, send_from_directory

from storefront.products import CATEGORIES, PLACEHOLDER_IMAGE, load_products, products_in_category

main = Blueprint("main", __name__)

CATEGORY_PAGES = {
    "pubg": {
        "title": "حسابات PUBG Mobile",
        "subtitle": "اختر حسابك المناسب. جميع العروض قابلة للتعديل من لوحة الإدارة.",
    },
    "free-fire": {
        "title": "حسابات Free Fire",
        "subtitle": "حسابات نادرة وعروض مميزة، قابلة للتعديل من لوحة الإدارة.",
    },
    "topup": {
        "title": "خدمات الشحن (Top-up)",
        "subtitle": "شحن شدات وجواهر وعملات بسرعة.",
    },
}


@main.app_context_processor
def inject_catalogue():
    return {"categories": CATEGORIES, "placeholder_image": PLACEHOLDER_IMAGE}


# -----------------------
# HOME
# -----------------------
@main.route("/")
def home():
    return render_template("index.html")


# -----------------------
# CATEGORY LISTINGS
# -----------------------
def _category_page(category):
    return render_template(
        "category.html",
        category=category,
        page=CATEGORY_PAGES[category],
        products=products_in_category(category),
    )


@main.route("/pubg")
def pubg():
    return _category_page("pubg")


@main.route("/free-fire")
def free_fire():
    return _category_page("free-fire")


@main.route("/topup")
def topup():
    return _category_page("topup")


# -----------------------
# CHAT
# -----------------------
@main.route("/chat/new")
def new_chat():
    products = load_products()
    selected = request.args.get("productId", "")
    if not any(p.get("id") == selected for p in products):
        selected = products[0]["id"] if products else ""

    return render_template("chat_new.html", products=products, selected=selected)


@main.route("/chat/<chat_id>")
def chat(chat_id):
    return render_template("chat.html", chat_id=chat_id)


# -----------------------
# UPLOADED FILES
# -----------------------
@main.route("/uploads/<path:filename>")
def uploaded_file(filename):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
