"""
Orbit Athlete Tracker
=====================
A small web front end for following athletes:
- Home feed of the latest results from followed athletes
- Discover page to search the athlete database and follow/unfollow
- My Orbit page filtered by name and sport category
- Athlete profiles with their recent results
"""

import logging
import os
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

from flask import (
    Flask,
    abort,
    flash,
    jsonify,
    redirect,
    render_template_string,
    request,
    session,
    url_for,
)

from orbit import AuthError, BackendConfig, BackendError, FollowTracker, OrbitBackend
from orbit.athletes import ALL_CATEGORIES, SPORTS_CATEGORIES, athlete_subtitle, filter_athletes
from orbit.cards import PLACEHOLDER_IMAGE, build_detail_card, build_feed_card
from orbit.result_formatter import order_fields
from orbit.settings import SECRET_KEY

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


PAGE_HEAD = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Orbit</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', system-ui, sans-serif;
            background: #f9fafb;
            color: #101828;
            line-height: 1.5;
        }
        .header {
            background: #7F56D9;
            color: white;
            padding: 20px;
            display: flex;
            justify-content: space-between;
            align-items: center;
        }
        .header a, .header button { color: white; text-decoration: none; margin-left: 16px; }
        .header button { background: none; border: none; font: inherit; cursor: pointer; }
        .content { max-width: 720px; margin: auto; padding: 16px; }
        .card {
            background: white;
            border-radius: 12px;
            padding: 16px;
            margin-bottom: 16px;
            box-shadow: 0 1px 3px rgba(16, 24, 40, 0.1);
        }
        .card-top { display: flex; align-items: center; gap: 12px; }
        .avatar { width: 50px; height: 50px; border-radius: 25px; object-fit: cover; }
        .avatar-large { width: 120px; height: 120px; border-radius: 60px; object-fit: cover; }
        .meta { color: #667085; font-size: 0.9em; }
        .divider { border-top: 1px solid #eaecf0; margin: 12px 0; }
        .stat-row { display: flex; justify-content: space-between; padding: 2px 0; }
        .stat-label { color: #667085; }
        .stat-value { font-weight: 600; }
        .pending { color: #666; font-style: italic; }
        .pill {
            display: inline-block;
            padding: 6px 14px;
            border-radius: 20px;
            border: 1px solid #d0d5dd;
            margin-right: 8px;
            color: #667085;
            text-decoration: none;
        }
        .pill.selected { background: #7F56D9; border-color: #7F56D9; color: white; }
        .follow-btn {
            border: 1px solid #7F56D9;
            background: white;
            color: #7F56D9;
            border-radius: 20px;
            padding: 4px 14px;
            cursor: pointer;
        }
        .follow-btn.following { background: #7F56D9; color: white; }
        .flash, .api-error { background: #fef3f2; color: #b42318; padding: 10px; border-radius: 8px; margin-bottom: 12px; }
        input[type=text], input[type=email], input[type=password] {
            width: 100%; padding: 10px; border: 1px solid #d0d5dd; border-radius: 8px; margin-bottom: 10px;
        }
    </style>
</head>
<body>
    <div class="header">
        <strong>{{ title }}</strong>
        {% if session.get('access_token') %}
        <nav>
            <a href="{{ url_for('home') }}">Home</a>
            <a href="{{ url_for('search') }}">Search</a>
            <a href="{{ url_for('my_orbit') }}">My Orbit</a>
            <form method="post" action="{{ url_for('logout') }}" style="display:inline">
                <button type="submit">Sign out</button>
            </form>
        </nav>
        {% endif %}
    </div>
    <div class="content">
        {% if api_error %}<div class="api-error">{{ api_error }}</div>{% endif %}
        {% for message in get_flashed_messages() %}<div class="flash">{{ message }}</div>{% endfor %}
"""

PAGE_FOOT = """
    </div>
</body>
</html>
"""

RESULT_ROWS = """
                {% if card.empty_message %}
                <p class="pending">{{ card.empty_message }}</p>
                {% else %}
                {% for field in card.fields %}
                <div class="stat-row">
                    <span class="stat-label">{{ field.label }}</span>
                    <span class="stat-value">{{ field.value }}</span>
                </div>
                {% endfor %}
                {% endif %}
"""

LOGIN_TEMPLATE = PAGE_HEAD + """
        <div class="card">
            <h2>Welcome to Orbit</h2>
            <form method="post" action="{{ url_for('login', next=next_url) }}">
                <input type="email" name="email" placeholder="Email" value="{{ email }}" autocapitalize="none">
                <input type="password" name="password" placeholder="Password">
                <button class="follow-btn following" type="submit">Sign In</button>
                <button class="follow-btn" type="submit" formaction="{{ url_for('signup') }}">Sign Up</button>
            </form>
        </div>
""" + PAGE_FOOT

HOME_TEMPLATE = PAGE_HEAD + """
        {% for card in cards %}
        <a class="card" style="display:block;color:inherit;text-decoration:none"
           href="{{ url_for('athlete_detail', athlete_id=card.athlete_id) }}">
            <div class="card-top">
                <img class="avatar" src="{{ card.athlete_image }}" alt="">
                <div>
                    <strong>{{ card.athlete_name }}</strong>
                    <div class="meta">{{ card.title }} &bull; {{ card.date_label }}</div>
                </div>
            </div>
            <div class="divider"></div>
""" + RESULT_ROWS + """
        </a>
        {% else %}
        <div class="card">
            <p>Your feed is empty.</p>
            <p class="meta">Follow athletes to see their latest results here!</p>
            <a href="{{ url_for('search') }}">Find Athletes</a>
        </div>
        {% endfor %}
""" + PAGE_FOOT

SEARCH_TEMPLATE = PAGE_HEAD + """
        <form method="get">
            <input type="text" name="q" placeholder="Search the database..." value="{{ search_text }}">
        </form>
        {% for row in rows %}
        <div class="card card-top">
            <img class="avatar" src="{{ row.athlete.image_url or placeholder }}" alt="">
            <div style="flex:1">
                <a href="{{ url_for('athlete_detail', athlete_id=row.athlete.id) }}"><strong>{{ row.athlete.name }}</strong></a>
                <div class="meta">{{ row.subtitle }}</div>
            </div>
            <form method="post" action="{{ url_for('follow', athlete_id=row.athlete.id) }}">
                <input type="hidden" name="next" value="{{ request.full_path }}">
                <button class="follow-btn {% if row.following %}following{% endif %}" type="submit">
                    {% if row.following %}Following{% else %}Follow{% endif %}
                </button>
            </form>
        </div>
        {% endfor %}
""" + PAGE_FOOT

ORBIT_TEMPLATE = PAGE_HEAD + """
        <form method="get">
            <input type="hidden" name="category" value="{{ selected_category }}">
            <input type="text" name="q" placeholder="Search athletes..." value="{{ search_text }}">
        </form>
        <div style="margin-bottom:16px">
            {% for category in categories %}
            <a class="pill {% if category.id == selected_category %}selected{% endif %}"
               href="{{ url_for('my_orbit', category=category.id, q=search_text) }}">{{ category.name }}</a>
            {% endfor %}
        </div>
        {% for athlete in athletes %}
        <a class="card card-top" style="color:inherit;text-decoration:none"
           href="{{ url_for('athlete_detail', athlete_id=athlete.id) }}">
            <img class="avatar" src="{{ athlete.image_url or placeholder }}" alt="">
            <div>
                <strong>{{ athlete.name }}</strong>
                <div class="meta">{{ athlete.category or 'Sport' }}</div>
            </div>
        </a>
        {% endfor %}
""" + PAGE_FOOT

ATHLETE_TEMPLATE = PAGE_HEAD + """
        <div style="text-align:center;margin-bottom:16px">
            <img class="avatar-large" src="{{ profile.image_url or placeholder }}" alt="">
            <h2>{{ profile.name }}</h2>
            <div class="meta">{{ subtitle }}</div>
        </div>
        <h3>Recent Results</h3>
        {% for card in cards %}
        <div class="card">
            <div class="stat-row">
                <strong>{{ card.title }}</strong>
                <span class="meta">{{ card.date_label }}</span>
            </div>
            <div class="divider"></div>
""" + RESULT_ROWS + """
        </div>
        {% endfor %}
""" + PAGE_FOOT


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not session.get("access_token"):
            return redirect(url_for("login", next=request.path))
        return view(*args, **kwargs)

    return wrapped


def _safe_next(target: Optional[str], fallback: str) -> str:
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return fallback


class OrbitApp:
    """Flask wrapper around the shared Orbit backend client."""

    def __init__(self, backend: Optional[OrbitBackend] = None):
        self.app = Flask(__name__)
        self.app.secret_key = SECRET_KEY
        self.api_error: Optional[str] = None
        self.backend = backend or self._connect_backend()

        self._setup_routes()

    def _connect_backend(self) -> Optional[OrbitBackend]:
        try:
            return OrbitBackend(BackendConfig.from_env())
        except ValueError as exc:
            logger.exception("Failed to configure backend: %s", exc)
            self.api_error = "Unable to connect to Orbit. Check SUPABASE_URL and SUPABASE_ANON_KEY."
            return None

    # ------------------------------------------------------------------ #
    # Data helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _credentials():
        return session.get("user_id"), session.get("access_token")

    def _render(self, template: str, title: str, **context):
        return render_template_string(
            template, title=title, api_error=self.api_error, placeholder=PLACEHOLDER_IMAGE, **context
        )

    def _feed_cards(self):
        if not self.backend:
            return []
        user_id, token = self._credentials()
        feed = self.backend.fetch_user_feed(user_id, access_token=token)
        return [build_feed_card(item) for item in feed]

    def _athletes(self):
        if not self.backend:
            return []
        _, token = self._credentials()
        return self.backend.fetch_athletes(access_token=token)

    # ------------------------------------------------------------------ #
    # Routes
    # ------------------------------------------------------------------ #
    def _setup_routes(self):
        @self.app.route("/login", methods=["GET", "POST"])
        def login():
            next_url = _safe_next(request.args.get("next"), url_for("home"))
            email = request.form.get("email", "")

            if request.method == "POST":
                if not self.backend:
                    flash("Login Failed: backend unavailable")
                else:
                    try:
                        auth = self.backend.sign_in(email, request.form.get("password", ""))
                    except AuthError as exc:
                        logger.warning("Login failed for %s: %s", email, exc)
                        flash(f"Login Failed: {exc}")
                    else:
                        session.update(auth.as_dict())
                        return redirect(next_url)

            return self._render(LOGIN_TEMPLATE, "Orbit", email=email, next_url=next_url)

        @self.app.route("/signup", methods=["POST"])
        def signup():
            email = request.form.get("email", "")
            if not self.backend:
                flash("Error: backend unavailable")
                return redirect(url_for("login"))

            try:
                auth = self.backend.sign_up(email, request.form.get("password", ""))
            except AuthError as exc:
                logger.warning("Sign-up failed for %s: %s", email, exc)
                flash(f"Error: {exc}")
                return redirect(url_for("login"))

            if auth is None:
                flash("Success: Check your email for the confirmation link!")
                return redirect(url_for("login"))

            session.update(auth.as_dict())
            return redirect(url_for("home"))

        @self.app.route("/logout", methods=["POST"])
        def logout():
            token = session.get("access_token")
            if token and self.backend:
                self.backend.sign_out(token)
            session.clear()
            return redirect(url_for("login"))

        @self.app.route("/")
        @login_required
        def home():
            return self._render(HOME_TEMPLATE, "Home", cards=self._feed_cards())

        @self.app.route("/search")
        @login_required
        def search():
            search_text = request.args.get("q", "")
            athletes = filter_athletes(self._athletes(), search_text)

            user_id, token = self._credentials()
            tracker = FollowTracker.load(self.backend, user_id, token) if self.backend else None
            rows = [
                {
                    "athlete": athlete,
                    "subtitle": athlete_subtitle(athlete),
                    "following": bool(tracker and tracker.is_following(athlete.get("id"))),
                }
                for athlete in athletes
            ]
            return self._render(SEARCH_TEMPLATE, "Discover", rows=rows, search_text=search_text)

        @self.app.route("/follow/<athlete_id>", methods=["POST"])
        @login_required
        def follow(athlete_id):
            next_url = _safe_next(request.form.get("next"), url_for("search"))
            if not self.backend:
                flash("Could not update follow status")
                return redirect(next_url)

            user_id, token = self._credentials()
            tracker = FollowTracker.load(self.backend, user_id, token)
            if not tracker.toggle(athlete_id):
                flash("Could not update follow status")
            return redirect(next_url)

        @self.app.route("/orbit")
        @login_required
        def my_orbit():
            search_text = request.args.get("q", "")
            category = request.args.get("category", ALL_CATEGORIES) or ALL_CATEGORIES
            athletes = filter_athletes(self._athletes(), search_text, category)
            return self._render(
                ORBIT_TEMPLATE,
                "My Orbit",
                athletes=athletes,
                categories=SPORTS_CATEGORIES,
                selected_category=category,
                search_text=search_text,
            )

        @self.app.route("/athletes/<athlete_id>")
        @login_required
        def athlete_detail(athlete_id):
            profile = self._load_profile(athlete_id)
            cards = [build_detail_card(event) for event in profile.get("events") or []]
            return self._render(
                ATHLETE_TEMPLATE,
                "Athlete Profile",
                profile=profile,
                subtitle=athlete_subtitle(profile),
                cards=cards,
            )

        @self.app.route("/api/feed")
        @login_required
        def api_feed():
            return jsonify(
                {
                    "feed": [card.as_dict() for card in self._feed_cards()],
                    "last_update": datetime.now(timezone.utc).isoformat(),
                    "api_error": self.api_error,
                }
            )

        @self.app.route("/api/athletes")
        @login_required
        def api_athletes():
            athletes = filter_athletes(
                self._athletes(),
                request.args.get("q", ""),
                request.args.get("category", ALL_CATEGORIES) or ALL_CATEGORIES,
            )
            return jsonify({"athletes": athletes, "api_error": self.api_error})

        @self.app.route("/api/athletes/<athlete_id>")
        @login_required
        def api_athlete(athlete_id):
            profile = self._load_profile(athlete_id)
            events = profile.pop("events", None) or []
            return jsonify(
                {
                    "athlete": profile,
                    "subtitle": athlete_subtitle(profile),
                    "events": [build_detail_card(event).as_dict() for event in events],
                }
            )

        @self.app.route("/api/format", methods=["POST"])
        def api_format():
            record = request.get_json(silent=True)
            fields = order_fields(record)
            return jsonify({"fields": [{"label": f.label, "value": f.value} for f in fields]})

    def _load_profile(self, athlete_id) -> dict:
        if not self.backend:
            abort(404)
        _, token = self._credentials()
        try:
            return self.backend.fetch_athlete_profile(athlete_id, access_token=token)
        except BackendError as exc:
            logger.warning("Unable to load athlete %s: %s", athlete_id, exc)
            abort(404)

    def run(self, host="0.0.0.0", port: Optional[int] = None, debug: bool = False):
        if port is None:
            port = int(os.getenv("PORT", 5000))
        self.app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    orbit_app = OrbitApp()
    orbit_app.run(debug=True)
