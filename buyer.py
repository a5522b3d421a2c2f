# Buyer-side storefront client
# Lists projects, pays through the server's Paystack helper, keeps purchases
# on this device and replays downloads from them.

import os, sys, argparse, logging, platform, webbrowser
import requests

import settings
from ledger import (LocalStore, ProjectLedger, TokenLedger, generate_token, normalize_token,
                    format_token, save_pending, load_pending, clear_pending, TOKEN_LENGTH)
from catalog import form_download_url

logger = logging.getLogger(__name__)

FORM_FIELDS = ("first_name", "last_name", "email", "phone", "lga", "address")


def default_store():
    return LocalStore(os.path.join(settings.STOREFRONT_HOME, "storage.json"))


def device_label():
    return f"{platform.system()} {platform.node()}".strip()


# -------- SERVER CALLS --------

def api_get(path, params=None):
    r = requests.get(f"{settings.STOREFRONT_API_BASE}{path}", params=params, timeout=settings.REQUEST_TIMEOUT)
    return r.json()


def api_post(path, body):
    r = requests.post(f"{settings.STOREFRONT_API_BASE}{path}", json=body, timeout=settings.REQUEST_TIMEOUT)
    return r.json()


def find_project(project_id):
    projects = api_get("/projects").get("projects", [])
    return next((p for p in projects if p["id"] == project_id), None)


def pay(email, item_id, item_name, wait, kind="project", metadata=None, on_initialized=None):
    """Initialize on the server, send the buyer to Paystack, then verify.

    Returns ``(reference, verify_result)``; reference is None when the
    transaction could not be started.
    """
    init = api_post("/initialize", {"email": email, "project_id": item_id, "project_name": item_name,
                                    "kind": kind, "metadata": metadata or {}})
    if not init.get("success"):
        print(f"Payment could not be started: {init.get('error')}")
        return None, init

    data = init["data"]
    reference = data["reference"]
    if on_initialized:
        on_initialized(reference)
    print(f"Complete your payment at:\n  {data['authorization_url']}")
    webbrowser.open(data["authorization_url"])
    wait("Press Enter once payment is complete... ")

    print("Verifying payment...")
    return reference, api_post("/verify", {"reference": reference})


# -------- DOWNLOADS --------

def download_file(url, dest_dir, filename):
    """Save ``url`` as dest_dir/filename; falls back to opening it in the browser."""
    dest = os.path.join(dest_dir, filename)
    part = dest + ".part"
    try:
        with requests.get(url, stream=True, timeout=settings.REQUEST_TIMEOUT) as r:
            r.raise_for_status()
            os.makedirs(dest_dir, exist_ok=True)
            with open(part, "wb") as f:
                for chunk in r.iter_content(chunk_size=65536):
                    f.write(chunk)
        os.replace(part, dest)
    except (requests.RequestException, OSError) as e:
        logger.warning(f"Download of {url} failed: {e}")
        if os.path.exists(part):
            os.remove(part)
        webbrowser.open(url)
        print("File opened in your browser. Please save it manually.")
        return None
    print(f"Downloaded: {dest}")
    return dest


def validate_form_data(data):
    """Error message for the first problem in the LGA form, or None."""
    if any(not (data.get(k) or "").strip() for k in FORM_FIELDS):
        return "Please fill in all required fields."
    if "@" not in data["email"] or "." not in data["email"]:
        return "Please enter a valid email address."
    return None


# -------- COMMANDS --------

def cmd_projects(args, store):
    data = api_get("/projects", {"q": args.query or "", "category": args.category or "all"})
    owned = ProjectLedger(store).filenames()
    projects = data.get("projects", [])
    for p in projects:
        mark = "[owned]" if p["filename"] in owned else f"₦{p['price']:,}"
        print(f"{p['id']:<40} {p['category']:<24} {p['size']:>12} {p['extension']:<5} {mark}")
    summary = f"{len(projects)} project{'' if len(projects) == 1 else 's'} available"
    if owned:
        summary += f" • {len(owned)} owned"
    print(summary)
    return 0


def _download_project(project, dest):
    return download_file(project["url"], dest, project["filename"])


def cmd_download(args, store):
    project = find_project(args.project_id)
    if not project:
        print("Project not found.")
        return 1
    if not ProjectLedger(store).is_purchased(project["filename"]):
        print(f"You have not bought this project yet. Run: buy {project['id']}")
        return 1
    _download_project(project, args.dest)
    return 0


def cmd_buy(args, store, wait=input):
    project = find_project(args.project_id)
    if not project:
        print("Project not found.")
        return 1
    ledger = ProjectLedger(store)
    if ledger.is_purchased(project["filename"]):
        print("You already own this project.")
        _download_project(project, args.dest)
        return 0
    if not (args.email.strip() and args.name.strip() and args.phone.strip()):
        print("Please fill all fields.")
        return 1

    metadata = {"project_file": project["filename"], "customer": args.name.strip(), "phone": args.phone.strip()}
    reference, result = pay(args.email.strip(), project["id"], project["title"], wait, metadata=metadata)
    if reference is None:
        return 1
    if not result.get("verified"):
        print(f"Payment not verified (status: {result.get('status') or result.get('error')}).")
        return 1

    ledger.mark_purchased(project["filename"], device=device_label(), reference=reference)
    print("Payment successful! Starting download...")
    _download_project(project, args.dest)
    return 0


def _complete_form_purchase(store, pending, reference, dest):
    record = TokenLedger(store).save(TokenLedger.new_record(
        pending["token"], reference, pending["formData"]["email"], pending["formData"]["lga"],
        pending["fileName"], form_download_url(pending["fileName"])))
    clear_pending(store)
    print(f"Payment verified. Your download token is {format_token(record['token'])}")
    print("Keep it: you can download this form again with `redownload <token>`.")
    _download_record(store, record, dest)
    return 0


def _download_record(store, record, dest):
    name = record["fileName"]
    if name.startswith("gdrive:"):
        name = f"{record['lga']}.pdf"
    if download_file(record["downloadUrl"], dest, name):
        TokenLedger(store).increment_download_count(record["token"])


def cmd_buy_form(args, store, wait=input):
    form = {k: (getattr(args, k) or "").strip() for k in FORM_FIELDS}
    error = validate_form_data(form)
    if error:
        print(error)
        return 1

    files = api_get("/config").get("FILES") or {}
    if form["lga"] not in files:
        print("Selected LGA form is not available yet.")
        return 1

    token = generate_token()
    pending = {"token": token, "formData": form, "fileName": files[form["lga"]]}

    def remember(reference):
        pending.update(save_pending(store, dict(pending, reference=reference)))

    metadata = {
        "custom_fields": [
            {"display_name": "Name", "variable_name": "name", "value": f"{form['first_name']} {form['last_name']}"},
            {"display_name": "LGA", "variable_name": "lga", "value": form["lga"]},
            {"display_name": "Token", "variable_name": "token", "value": token},
        ],
        "token": token,
        "lga": form["lga"],
    }
    reference, result = pay(form["email"], form["lga"], f"{form['lga']} LGA form", wait,
                            kind="lga", metadata=metadata, on_initialized=remember)
    if reference is None:
        return 1
    if not result.get("verified"):
        print("Payment verification failed. Run `resume` after paying, or contact support.")
        return 1
    return _complete_form_purchase(store, pending, reference, args.dest)


def cmd_resume(args, store):
    pending = load_pending(store)
    if not pending:
        print("No pending purchase to resume.")
        return 1
    result = api_post("/verify", {"reference": pending["reference"]})
    if not result.get("verified"):
        print(f"Payment {pending['reference']} is not verified yet (status: {result.get('status')}).")
        return 1
    return _complete_form_purchase(store, pending, pending["reference"], args.dest)


def cmd_redownload(args, store):
    token = normalize_token(args.token)
    if len(token) != TOKEN_LENGTH:
        print("Please enter a valid 12-character token.")
        return 1
    record = TokenLedger(store).find(token)
    if not record:
        print("Token not found. Check your spelling or make a new purchase.")
        return 1
    if not record.get("verified"):
        print("Payment pending verification. Contact support if this persists.")
        return 1
    print("Welcome back! Your download is ready.")
    _download_record(store, record, args.dest)
    return 0


# -------- CLI --------

def build_parser():
    parser = argparse.ArgumentParser(prog="cybersweeft", description="Buy and download Cyber Sweeft documents")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--dest", default=os.getcwd(), help="download folder")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("projects", help="list project documents")
    p.add_argument("-q", "--query")
    p.add_argument("-c", "--category")

    p = sub.add_parser("buy", help="buy a project document")
    p.add_argument("project_id")
    p.add_argument("--email", required=True)
    p.add_argument("--name", required=True)
    p.add_argument("--phone", required=True)

    p = sub.add_parser("download", help="download a project you own")
    p.add_argument("project_id")

    p = sub.add_parser("buy-form", help="buy a local-government ID form")
    for field in FORM_FIELDS:
        p.add_argument("--" + field.replace("_", "-"), dest=field, required=True)

    sub.add_parser("resume", help="finish a form purchase interrupted after payment")

    p = sub.add_parser("redownload", help="download a form again with its token")
    p.add_argument("token")
    return parser


COMMANDS = {
    "projects": cmd_projects,
    "buy": cmd_buy,
    "download": cmd_download,
    "buy-form": cmd_buy_form,
    "resume": cmd_resume,
    "redownload": cmd_redownload,
}


def main(argv=None, store=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    store = store or default_store()
    try:
        return COMMANDS[args.command](args, store)
    except (requests.RequestException, ValueError) as e:
        logger.debug("Server call failed", exc_info=True)
        print(f"Could not reach the storefront at {settings.STOREFRONT_API_BASE}: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
