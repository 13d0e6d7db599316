"""In-memory stand-ins for requests sessions and the Supabase client."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import requests

INVALID_JSON = object()


class FakeResponse:
    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json = json_data

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json is INVALID_JSON:
            raise ValueError("not json")
        return self._json


class FakeSession:
    """Replays canned responses (or raises canned exceptions) for .post()."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        result = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(result, Exception):
            raise result
        return result


def connection_error():
    return requests.ConnectionError("connection refused")


def gemini_response(text, status_code=200):
    return FakeResponse(status_code, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def vision_response(text=None, labels=()):
    annotation = {}
    if text is not None:
        annotation["textAnnotations"] = [{"description": text}]
    annotation["labelAnnotations"] = [{"description": label, "score": 0.9} for label in labels]
    return FakeResponse(200, {"responses": [annotation]})


# ============================================================
# Supabase
# ============================================================
class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.descending = False
        self.max_rows = None

    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, row):
        self.op = "insert"
        self.payload = row
        return self

    def update(self, changes):
        self.op = "update"
        self.payload = changes
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = column
        self.descending = desc
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    def execute(self):
        if self.table in self.db.failing_tables:
            raise RuntimeError(f"{self.table} unavailable")
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            row = dict(self.payload)
            row.setdefault("id", f"{self.table}-{len(rows) + 1}")
            row.setdefault("created_at", self.db.next_timestamp())
            rows.append(row)
            return FakeResult([dict(row)])

        matched = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]
        if self.op == "update":
            for r in matched:
                r.update(self.payload)
            return FakeResult([dict(r) for r in matched])

        if self.order_by:
            matched = sorted(matched, key=lambda r: r.get(self.order_by) or "", reverse=self.descending)
        if self.max_rows is not None:
            matched = matched[:self.max_rows]
        return FakeResult([dict(r) for r in matched])


class FakeAuthError(Exception):
    def __init__(self, message):
        super().__init__(message)
        self.message = message


class FakeAuth:
    def __init__(self, confirm_email=False):
        self.users = {}
        self.tokens = {}
        self.confirm_email = confirm_email
        self.updates = []
        self.fail_updates = False
        self.signed_out = False

    def _session(self, user):
        token = f"token-{user.id}"
        self.tokens[token] = user
        return SimpleNamespace(access_token=token, refresh_token=f"refresh-{user.id}")

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.users:
            raise FakeAuthError("User already registered")
        user = SimpleNamespace(id=f"user-{len(self.users) + 1}", email=email)
        self.users[email] = (credentials["password"], user)
        session = None if self.confirm_email else self._session(user)
        return SimpleNamespace(user=user, session=session)

    def sign_in_with_password(self, credentials):
        stored = self.users.get(credentials["email"])
        if not stored or stored[0] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        user = stored[1]
        return SimpleNamespace(user=user, session=self._session(user))

    def get_user(self, token):
        if token not in self.tokens:
            raise FakeAuthError("invalid JWT")
        return SimpleNamespace(user=self.tokens[token])

    def update_user(self, attributes):
        if self.fail_updates:
            raise FakeAuthError("Email rate limit exceeded")
        self.updates.append(attributes)
        return SimpleNamespace(user=None)

    def sign_out(self):
        self.signed_out = True


class FakeSupabase:
    def __init__(self, confirm_email=False):
        self.tables = {}
        self.failing_tables = set()
        self.auth = FakeAuth(confirm_email=confirm_email)
        self._clock = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def next_timestamp(self):
        self._clock += timedelta(minutes=1)
        return self._clock.isoformat()

    def table(self, name):
        return FakeQuery(self, name)


def medicine_json(name="Paracetamol"):
    return gemini_response(
        'Here is the information:\n```json\n{'
        f'"medicineName": "{name}", '
        '"description": "An analgesic and antipyretic.", '
        '"uses": "Pain and fever.", '
        '"sideEffects": "Rarely rash; liver damage in overdose.", '
        '"dosage": "500-1000 mg every 4-6 hours, max 4 g a day."'
        '}\n```'
    )
