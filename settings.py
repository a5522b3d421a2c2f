# Cyber Sweeft storefront settings
# Everything is read from the environment (or a local .env file)

import os, json, logging
from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger(__name__)

# ⚡ Paystack keys (the secret key stays on the server)
PAYSTACK_SECRET_KEY = os.getenv("PAYSTACK_SECRET_KEY", "sk_live_your_secret_key_here")
PAYSTACK_PUBLIC_KEY = os.getenv("PAYSTACK_PUBLIC_KEY", "pk_live_your_public_key_here")
PAYSTACK_API = os.getenv("PAYSTACK_API", "https://api.paystack.co").rstrip("/")

# Every document sells for the same price: ₦2,500 in kobo
FIXED_PRICE_KOBO = int(os.getenv("FIXED_PRICE_KOBO", "250000"))
CURRENCY = "NGN"

# Where the project documents live
GITHUB_REPO = os.getenv("GITHUB_REPO", "cybersweeft1/cybersweeft")
GITHUB_BRANCH = os.getenv("GITHUB_BRANCH", "main")
PROJECTS_FOLDER = os.getenv("PROJECTS_FOLDER", "projects")

# Where the local-government forms live
FORMS_REPO = os.getenv("FORMS_REPO", "cybersweeft1/cyber-sweeft-services")
FORMS_FOLDER = os.getenv("FORMS_FOLDER", "local-gov-forms")


def _load_lga_files(raw):
    # LGA name -> file name in FORMS_FOLDER, or "gdrive:<file id>"
    if not raw:
        return {}
    try:
        files = json.loads(raw)
    except ValueError as e:
        logger.warning(f"LGA_FILES is not valid JSON, ignoring it: {e}")
        return {}
    if not isinstance(files, dict):
        logger.warning("LGA_FILES must be a JSON object, ignoring it")
        return {}
    return files


LGA_FILES = _load_lga_files(os.getenv("LGA_FILES", ""))

CALLBACK_URL = os.getenv("CALLBACK_URL", "")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))

# Buyer side
STOREFRONT_API_BASE = os.getenv("STOREFRONT_API_BASE", "http://127.0.0.1:5000/api").rstrip("/")
STOREFRONT_HOME = os.path.expanduser(os.getenv("STOREFRONT_HOME", "~/.cybersweeft"))
