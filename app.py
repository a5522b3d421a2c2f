# CYBER SWEEFT - Document Storefront
# Flask backend: Paystack initialize/verify + public config + project listing

import re, logging
from flask import Flask, request, jsonify, render_template

import catalog
import paystack_api

app = Flask(__name__)
logger = logging.getLogger(__name__)

# Paystack references are built by make_reference: PRJ_<ms>_<suffix>
REFERENCE_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _text(data, key, default=""):
    # None when the field is present but not a string
    value = data.get(key)
    if value is None:
        return default
    return value.strip() if isinstance(value, str) else None

# -------- ROUTES --------

@app.route("/")
def home():
    # templates/index.html picks the config up from the app-config script tag
    return render_template("index.html", public_config=paystack_api.get_public_config())

@app.route("/api/config")
def public_config():
    return jsonify(paystack_api.get_public_config())

@app.route("/api/projects")
def list_projects():
    projects = catalog.load_projects()
    filtered = catalog.filter_projects(projects, request.args.get("q", ""),
                                       request.args.get("category", "all"))
    return jsonify({"projects": filtered, "categories": catalog.get_categories(projects)})

# -------- PAYMENTS --------

@app.route("/api/initialize", methods=["POST"])
def initialize():
    data = _body()
    email = _text(data, "email")
    item_id = _text(data, "project_id")
    item_name = _text(data, "project_name")
    callback_url = _text(data, "callback_url")
    if not email or not item_id:
        return jsonify({"success": False, "error": "email and project_id are required"}), 400
    if item_name is None or callback_url is None:
        return jsonify({"success": False, "error": "project_name and callback_url must be strings"}), 400

    prefix = "LGA" if data.get("kind") == "lga" else "PRJ"
    extra = data.get("metadata") if isinstance(data.get("metadata"), dict) else None
    result = paystack_api.initialize_transaction(email, item_id, item_name or item_id,
                                                 callback_url=callback_url or None,
                                                 prefix=prefix, extra_metadata=extra)
    return jsonify(result), (200 if result["success"] else 502)

@app.route("/api/verify", methods=["POST"])
def verify():
    reference = _text(_body(), "reference")
    if not reference:
        return jsonify({"success": False, "verified": False, "error": "reference is required"}), 400
    if not REFERENCE_RE.match(reference):
        return jsonify({"success": False, "verified": False, "error": "invalid reference"}), 400

    result = paystack_api.verify_transaction(reference)
    return jsonify(result), (200 if result["success"] else 502)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(debug=True, port=5000)
