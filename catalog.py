# Project catalog built from the document filenames in the GitHub repo

import re, logging
import requests

import settings

logger = logging.getLogger(__name__)

PROJECT_PRICE = 2500
MANIFEST_NAME = "manifest.json"

# Checked in order against the lower-cased filename; first hit wins
CATEGORY_KEYWORDS = {
    "computer": "Computer Science",
    "cs": "Computer Science",
    "software": "Software Engineering",
    "web": "Web Development",
    "mobile": "Mobile Development",
    "data": "Data Science",
    "ai": "Artificial Intelligence",
    "ml": "Machine Learning",
    "network": "Networking",
    "security": "Cyber Security",
    "database": "Database Systems",
    "cloud": "Cloud Computing",
    "iot": "IoT",
    "robotics": "Robotics",
    "accounting": "Accounting",
    "business": "Business Admin",
    "marketing": "Marketing",
    "economics": "Economics",
    "law": "Law",
    "medicine": "Medicine",
    "nursing": "Nursing",
    "pharmacy": "Pharmacy",
    "engineering": "Engineering",
    "electrical": "Electrical Engineering",
    "mechanical": "Mechanical Engineering",
    "civil": "Civil Engineering",
    "chemical": "Chemical Engineering",
    "agric": "Agriculture",
    "education": "Education",
    "mass": "Mass Communication",
    "sociology": "Sociology",
    "psychology": "Psychology",
    "political": "Political Science",
    "history": "History",
    "english": "English",
    "literature": "Literature",
    "biology": "Biology",
    "chemistry": "Chemistry",
    "physics": "Physics",
    "math": "Mathematics",
    "statistics": "Statistics",
}

FILE_ICONS = {
    "PDF": "fa-file-pdf",
    "DOC": "fa-file-word",
    "DOCX": "fa-file-word",
    "PPT": "fa-file-powerpoint",
    "PPTX": "fa-file-powerpoint",
    "ZIP": "fa-file-archive",
    "RAR": "fa-file-archive",
    "XLS": "fa-file-excel",
    "XLSX": "fa-file-excel",
}


# -------- STATIC HOSTING LINKS --------

def raw_url(repo, branch, folder, name):
    return f"https://raw.githubusercontent.com/{repo}/{branch}/{folder}/{name}"


def drive_url(file_id):
    return f"https://drive.google.com/uc?export=download&id={file_id}"


def form_download_url(file_name):
    """Direct link for an LGA_FILES entry; ``gdrive:<id>`` points at Google Drive."""
    if file_name.startswith("gdrive:"):
        return drive_url(file_name[len("gdrive:"):])
    return raw_url(settings.FORMS_REPO, settings.GITHUB_BRANCH, settings.FORMS_FOLDER, file_name)


# -------- PARSING --------

def _stem(name):
    return re.sub(r"\.[^/.]+$", "", name)


def format_file_size(size):
    if not size:
        return "Unknown size"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def get_file_icon(ext):
    return FILE_ICONS.get(ext.upper(), "fa-file")


def parse_project_file(file, purchased=()):
    """Turn a GitHub contents entry (or a bare filename) into a product dict.

    Filenames look like ``Computer_Science_Student_Portal_2024.pdf`` or
    ``Hostel_Management.docx``; the category comes from CATEGORY_KEYWORDS,
    falling back to the first word of the name.
    """
    if isinstance(file, str):
        file = {"name": file}
    name = file["name"]
    stem = _stem(name)
    parts = [p for p in re.split(r"[_-]+", stem) if p]

    category = "General"
    lower_name = name.lower()
    for key, cat in CATEGORY_KEYWORDS.items():
        if key in lower_name:
            category = cat
            break

    title = re.sub(r"[_-]+", " ", stem)
    title = re.sub(re.escape(category), "", title, flags=re.IGNORECASE)
    title = re.sub(r"\d{4}", "", title)
    title = re.sub(r"\s+", " ", title).strip()

    if category == "General" and len(parts) > 1:
        category = parts[0][:1].upper() + parts[0][1:]

    return {
        "id": re.sub(r"[^a-z0-9]", "_", stem.lower()),
        "filename": name,
        "title": title or stem,
        "category": category,
        "url": file.get("download_url") or raw_url(settings.GITHUB_REPO, settings.GITHUB_BRANCH,
                                                   settings.PROJECTS_FOLDER, name),
        "size": format_file_size(file.get("size") or 0),
        "extension": name.rsplit(".", 1)[-1].upper(),
        "price": PROJECT_PRICE,
        "purchased": name in purchased,
    }


# -------- FETCHING --------

def _fetch_contents_api():
    url = (f"https://api.github.com/repos/{settings.GITHUB_REPO}/contents/"
           f"{settings.PROJECTS_FOLDER}?ref={settings.GITHUB_BRANCH}")
    try:
        r = requests.get(url, timeout=settings.REQUEST_TIMEOUT)
        if not r.ok:
            logger.warning(f"GitHub API returned {r.status_code} for {url}")
            return []
        listing = r.json()
        if not isinstance(listing, list):
            logger.warning(f"GitHub API did not return a folder listing for {url}")
            return []
        return [item for item in listing if isinstance(item, dict) and item.get("type") == "file"]
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"GitHub API failed, trying manifest: {e}")
        return []


def _fetch_manifest():
    # manifest.json in the projects folder: {"files": [{"name": ..., "size": ...}, "plain.pdf"]}
    url = raw_url(settings.GITHUB_REPO, settings.GITHUB_BRANCH, settings.PROJECTS_FOLDER, MANIFEST_NAME)
    try:
        r = requests.get(url, timeout=settings.REQUEST_TIMEOUT)
        if r.ok:
            manifest = r.json()
            files = manifest.get("files") if isinstance(manifest, dict) else None
            if isinstance(files, list):
                return [f for f in files if isinstance(f, str) or (isinstance(f, dict) and f.get("name"))]
            logger.warning(f"Manifest at {url} has no files list")
            return []
        logger.info(f"No manifest at {url} ({r.status_code})")
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Manifest fetch failed: {e}")
    return []


def fetch_project_files():
    files = _fetch_contents_api()
    if not files:
        files = _fetch_manifest()
    return [f for f in files if (f if isinstance(f, str) else f.get("name")) not in (None, MANIFEST_NAME)]


def load_projects(purchased=()):
    return [parse_project_file(f, purchased) for f in fetch_project_files()]


def get_categories(projects):
    return ["all"] + sorted({p["category"] for p in projects})


def filter_projects(projects, query="", category="all"):
    query = (query or "").lower().strip()
    result = list(projects)
    if query:
        result = [p for p in result
                  if query in p["title"].lower()
                  or query in p["category"].lower()
                  or query in p["filename"].lower()]
    if category and category != "all":
        result = [p for p in result if p["category"] == category]
    return result
