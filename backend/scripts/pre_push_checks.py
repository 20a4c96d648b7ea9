#!/usr/bin/env python3
"""
Pre-push / production readiness checks.
Run from backend dir with project venv active: python scripts/pre_push_checks.py
"""
import sys
from pathlib import Path

BACKEND = Path(__file__).resolve().parent.parent
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

EXPECTED_ROUTES = {
    ("POST", "/auth/setup"),
    ("POST", "/auth/login"),
    ("GET", "/topics"),
    ("DELETE", "/topics/{topic_id}"),
    ("POST", "/questions"),
    ("PUT", "/questions/{question_id}/feedback"),
    ("POST", "/questions/{question_id}/submissions"),
    ("PUT", "/question-submissions/{submission_id}/grade"),
    ("POST", "/simulated-exams"),
    ("POST", "/groups/{group_id}/members"),
    ("POST", "/activities/{activity_id}/items"),
    ("PUT", "/activities/{activity_id}/items/reorder"),
}


def check_imports():
    from proximos.main import app  # noqa: F401
    from proximos.database import init_sqlite_db  # noqa: F401
    from proximos.models.activity import ContentKind
    assert len(ContentKind) == 5
    return "imports"


def check_routes():
    from proximos.main import app
    registered = {(method, route.path) for route in app.routes for method in getattr(route, "methods", None) or ()}
    missing = EXPECTED_ROUTES - registered
    assert not missing, f"missing routes: {sorted(missing)}"
    return "routes"


def check_secret_key():
    from proximos.config import settings, DEFAULT_SECRET_KEY
    if settings.is_production:
        assert (settings.secret_key or "").strip() != DEFAULT_SECRET_KEY, "SECRET_KEY is the default"
    return "secret_key"


def check_init_db():
    from proximos.database import init_sqlite_db
    init_sqlite_db()
    return "init_sqlite_db"


def main():
    checks = [check_imports, check_routes, check_secret_key, check_init_db]
    for fn in checks:
        try:
            name = fn()
            print(f"OK {name}")
        except Exception as e:
            print(f"FAIL {fn.__name__}: {e}")
            return 1
    print("All pre-push checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
