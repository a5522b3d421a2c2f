# Purchase records kept on the buyer's device
# Nothing here is sent to or stored by the server.

import os, json, time, secrets, logging, datetime

logger = logging.getLogger(__name__)

TOKEN_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
TOKEN_LENGTH = 12
PENDING_KEY = "pending_tx"
PENDING_MAX_AGE = 30 * 60


def _now():
    return datetime.datetime.utcnow().isoformat()


# -------- TOKENS --------

def generate_token():
    """12 characters without look-alikes (no I, O, 0, 1)."""
    return "".join(secrets.choice(TOKEN_CHARS) for _ in range(TOKEN_LENGTH))


def normalize_token(text):
    return "".join(c for c in text if c.isascii() and c.isalnum()).upper()[:TOKEN_LENGTH]


def format_token(token):
    token = normalize_token(token)
    return "-".join(token[i:i + 4] for i in range(0, len(token), 4))


# -------- STORAGE --------

class LocalStore:
    """A flat JSON file of string keys, read and written whole on every call."""

    def __init__(self, path):
        self.path = path

    def _read(self):
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except ValueError as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data):
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, self.path)

    def get_item(self, key, default=None):
        return self._read().get(key, default)

    def set_item(self, key, value):
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key):
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


def _as_list(value):
    return value if isinstance(value, list) else []


class ProjectLedger:
    """Which project files this device has paid for."""

    def __init__(self, store, key="cyber_sweeft_purchases_v1"):
        self.store = store
        self.key = key

    def purchases(self):
        return _as_list(self.store.get_item(self.key, []))

    def filenames(self):
        return {p.get("filename") for p in self.purchases()}

    def is_purchased(self, filename):
        return filename in self.filenames()

    def mark_purchased(self, filename, device="", reference=None):
        purchases = self.purchases()
        if any(p.get("filename") == filename for p in purchases):
            return False
        purchases.append({
            "filename": filename,
            "date": _now(),
            "device": device[:50],
            "reference": reference,
        })
        self.store.set_item(self.key, purchases)
        return True


class TokenLedger:
    """Local-government form purchases, looked up by download token."""

    def __init__(self, store, key="cyber_sweeft_lg_v2"):
        self.store = store
        self.key = key

    def records(self):
        return _as_list(self.store.get_item(self.key, []))

    @staticmethod
    def new_record(token, reference, email, lga, file_name, download_url, verified=True):
        return {
            "token": normalize_token(token),
            "reference": reference,
            "email": email,
            "lga": lga,
            "fileName": file_name,
            "downloadUrl": download_url,
            "purchaseDate": _now(),
            "downloadCount": 0,
            "verified": verified,
        }

    def save(self, record):
        records = self.records()
        records.append(record)
        self.store.set_item(self.key, records)
        return record

    def find(self, token):
        token = normalize_token(token)
        return next((r for r in self.records() if r.get("token") == token), None)

    def increment_download_count(self, token):
        token = normalize_token(token)
        records = self.records()
        for r in records:
            if r.get("token") == token:
                r["downloadCount"] = (r.get("downloadCount") or 0) + 1
                r["lastDownload"] = _now()
                self.store.set_item(self.key, records)
                return r
        return None


# -------- PENDING TRANSACTION --------

def save_pending(store, pending):
    pending = dict(pending, timestamp=pending.get("timestamp") or time.time())
    store.set_item(PENDING_KEY, pending)
    return pending


def load_pending(store, now=None):
    pending = store.get_item(PENDING_KEY)
    if not pending:
        return None
    now = time.time() if now is None else now
    if now - pending.get("timestamp", 0) > PENDING_MAX_AGE:
        logger.info(f"Dropping stale pending transaction {pending.get('reference')}")
        store.remove_item(PENDING_KEY)
        return None
    return pending


def clear_pending(store):
    store.remove_item(PENDING_KEY)
