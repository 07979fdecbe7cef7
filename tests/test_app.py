import pytest

from orbit_app import OrbitApp


@pytest.fixture
def orbit(fake_backend):
    orbit_app = OrbitApp(backend=fake_backend)
    orbit_app.app.config.update(TESTING=True)
    return orbit_app


@pytest.fixture
def client(orbit):
    return orbit.app.test_client()


@pytest.fixture
def logged_in(client):
    with client.session_transaction() as sess:
        sess["access_token"] = "token-1"
        sess["user_id"] = "user-1"
    return client


def test_pages_require_login(client):
    response = client.get("/")
    assert response.status_code == 302
    assert "/login" in response.headers["Location"]


def test_login_success_stores_session(client):
    response = client.post("/login", data={"email": "fan@orbit.app", "password": "secret"})

    assert response.status_code == 302
    with client.session_transaction() as sess:
        assert sess["access_token"] == "token-1"
        assert sess["user_id"] == "user-1"


def test_login_failure_shows_message(client):
    response = client.post("/login", data={"email": "fan@orbit.app", "password": "nope"})

    assert response.status_code == 200
    assert b"Login Failed: Invalid login credentials" in response.data


def test_signup_pending_confirmation(client):
    response = client.post(
        "/signup", data={"email": "confirm@orbit.app", "password": "pw"}, follow_redirects=True
    )

    assert b"Check your email for the confirmation link!" in response.data


def test_logout_clears_session(logged_in, fake_backend):
    response = logged_in.post("/logout")

    assert response.status_code == 302
    assert fake_backend.signed_out == ["token-1"]
    with logged_in.session_transaction() as sess:
        assert "access_token" not in sess


def test_home_renders_ordered_results(logged_in):
    response = logged_in.get("/")
    body = response.get_data(as_text=True)

    assert response.status_code == 200
    assert "Usain Bolt" in body
    assert body.index("1st") < body.index("9.58") < body.index("100m") < body.index("+0.9")
    assert "hidden_id" not in body and "Hidden Id" not in body
    assert "Detailed results pending..." in body


def test_home_empty_state(logged_in, fake_backend):
    fake_backend.follows = set()

    body = logged_in.get("/").get_data(as_text=True)

    assert "Your feed is empty." in body


def test_search_filters_and_marks_followed(logged_in):
    body = logged_in.get("/search?q=bolt").get_data(as_text=True)

    assert "Usain Bolt" in body
    assert "Carlos Alcaraz" not in body
    assert "Following" in body
    assert "Sprints" in body


def test_follow_toggle(logged_in, fake_backend):
    response = logged_in.post("/follow/2", data={"next": "/search"})

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/search")
    assert fake_backend.toggle_calls == [("user-1", "2", False)]


def test_follow_failure_flashes(logged_in, fake_backend):
    fake_backend.toggle_succeeds = False

    response = logged_in.post("/follow/1", data={"next": "https://evil.example"}, follow_redirects=True)

    assert b"Could not update follow status" in response.data
    assert fake_backend.toggle_calls == [("user-1", "1", True)]


def test_my_orbit_category_filter(logged_in):
    body = logged_in.get("/orbit?category=tennis").get_data(as_text=True)

    assert "Carlos Alcaraz" in body
    assert "Usain Bolt" not in body


def test_athlete_detail(logged_in):
    body = logged_in.get("/athletes/1").get_data(as_text=True)

    assert "Recent Results" in body
    assert "Olympic Final" in body
    assert "Aug 16, 2009" in body
    assert "No detailed results available." in body


def test_athlete_detail_missing_returns_404(logged_in):
    assert logged_in.get("/athletes/999").status_code == 404


def test_api_feed(logged_in):
    data = logged_in.get("/api/feed").get_json()

    first = data["feed"][0]
    assert first["athlete_name"] == "Usain Bolt"
    assert first["fields"][0] == {"label": "Place", "value": "1st"}
    assert data["feed"][1]["empty_message"] == "Detailed results pending..."


def test_api_athletes_filters(logged_in):
    data = logged_in.get("/api/athletes?category=f1").get_json()

    assert [a["name"] for a in data["athletes"]] == ["Max Verstappen"]


def test_api_athlete(logged_in):
    data = logged_in.get("/api/athletes/1").get_json()

    assert data["athlete"]["name"] == "Usain Bolt"
    assert data["subtitle"] == "Sprints"
    assert "events" not in data["athlete"]
    assert data["events"][0]["fields"][1] == {"label": "Mark", "value": "9.58"}


def test_api_format_does_not_need_login(client):
    response = client.post("/api/format", json={"rank": "22", "custom_note": "", "hidden_id": "x"})

    assert response.get_json() == {
        "fields": [{"label": "Place", "value": "22nd"}, {"label": "Custom Note", "value": "-"}]
    }


def test_api_format_rejects_nothing(client):
    response = client.post("/api/format", data="not json", content_type="text/plain")

    assert response.get_json() == {"fields": []}


def test_missing_backend_config_sets_api_error(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

    orbit_app = OrbitApp()
    client = orbit_app.app.test_client()
    with client.session_transaction() as sess:
        sess["access_token"] = "token-1"
        sess["user_id"] = "user-1"

    assert orbit_app.backend is None
    body = client.get("/").get_data(as_text=True)
    assert "Unable to connect to Orbit" in body
    assert "Your feed is empty." in body
