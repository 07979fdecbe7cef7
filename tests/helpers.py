"""Test doubles shared across the suite."""

import json as jsonlib

from orbit import AuthError, AuthSession, BackendError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is not None:
            self.text = text
        else:
            self.text = "" if payload is None else jsonlib.dumps(payload)
        self.content = self.text.encode("utf-8")

    def json(self):
        if self._payload is None:
            return jsonlib.loads(self.text)
        return self._payload


class FakeSession:
    """Records outgoing requests and answers them from a queue."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeBackend:
    """In-memory stand-in for OrbitBackend used by the web tests."""

    def __init__(self):
        self.athletes = [
            {"id": 1, "name": "Usain Bolt", "category": "athletics", "subcategory": "Sprints"},
            {"id": 2, "name": "Carlos Alcaraz", "category": "tennis"},
            {"id": 3, "name": "Max Verstappen", "category": "F1"},
        ]
        self.follows = {1}
        self.events = {
            1: [
                {
                    "id": 10,
                    "title": "Olympic Final",
                    "start_time": "2009-08-16T20:45:00Z",
                    "result": {
                        "place_rank": "1",
                        "mark": "9.58",
                        "discipline_clean": "100m",
                        "wind": "+0.9",
                        "hidden_id": "x",
                    },
                    "category": "athletics",
                },
                {"id": 11, "title": "Heat 2", "start_time": "2009-08-15T18:00:00Z", "result": None},
            ]
        }
        self.toggle_succeeds = True
        self.toggle_calls = []
        self.signed_out = []

    def sign_in(self, email, password):
        if password != "secret":
            raise AuthError("Invalid login credentials", 400)
        return AuthSession(access_token="token-1", user_id="user-1", email=email)

    def sign_up(self, email, password):
        if email.startswith("confirm"):
            return None
        return AuthSession(access_token="token-2", user_id="user-2", email=email)

    def sign_out(self, access_token):
        self.signed_out.append(access_token)

    def fetch_athletes(self, access_token=None):
        return [dict(a) for a in self.athletes]

    def fetch_followed_athletes(self, user_id, access_token=None):
        return [dict(a) for a in self.athletes if a["id"] in self.follows]

    def fetch_athlete_profile(self, athlete_id, access_token=None):
        for athlete in self.athletes:
            if str(athlete["id"]) == str(athlete_id):
                return {**athlete, "events": list(self.events.get(athlete["id"], []))}
        raise BackendError("JSON object requested, multiple (or no) rows returned", 406)

    def toggle_follow(self, user_id, entity_id, is_currently_following, access_token=None):
        self.toggle_calls.append((user_id, entity_id, is_currently_following))
        return self.toggle_succeeds

    def fetch_user_feed(self, user_id, access_token=None, limit=None):
        feed = []
        for athlete in self.athletes:
            if athlete["id"] not in self.follows:
                continue
            for event in self.events.get(athlete["id"], []):
                feed.append(
                    {
                        **event,
                        "entity_id": athlete["id"],
                        "entities": {"name": athlete["name"], "image_url": None},
                    }
                )
        return feed
