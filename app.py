import logging

import bleach
from datetime import date
from markdown import markdown

from flask import Flask, render_template, redirect, url_for, request, flash, abort, jsonify
from flask_login import (
    LoginManager, login_user,
    logout_user, login_required, current_user
)
from flask_migrate import Migrate

import config
from colors import DEFAULT_EVENT_COLOR, normalize_hex
from datekeys import to_date_key, parse_date_key, today_key
from event_store import EventRecord, SessionContext, load_store, save_store
from models import db, User
from month_grid import MonthCursor, build_grid, weekday_labels
from storage import DatabaseStorage

logger = logging.getLogger(__name__)

# Sanitizing
# note that <img> and friends are not allowed yet

ALLOWED_TAGS = bleach.sanitizer.ALLOWED_TAGS.union({
    "p","br","pre","code","blockquote",
    "ul","ol","li",
    "strong","em","del",
    "h1","h2","h3","h4",
    "table","thead","tbody","tr","th","td","a",
    "div", "span"
})
ALLOWED_ATTRS = {
    "a": ["href", "title", "rel"],
    "code": ["class"],
    "span": ["class"],
    "pre": ["class"],
    "div": ["class"]
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]

MARKDOWN_EXTENSIONS = [
    "fenced_code",
    "tables",
    "sane_lists",
    "pymdownx.superfences",
    "pymdownx.highlight",
    "pymdownx.tilde",
    "pymdownx.tasklist"
]

def sanitize_html(html: str) -> str:
    cleaned = bleach.clean(
        html,
        tags=list(ALLOWED_TAGS),
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )
    cleaned = bleach.linkify(cleaned)
    return cleaned

def render_description(text: str | None) -> str:
    if not text:
        return ""
    return sanitize_html(markdown(text, extensions=MARKDOWN_EXTENSIONS))

app = Flask(__name__)
app.config["SECRET_KEY"] = config.SECRET_KEY
app.config["SQLALCHEMY_DATABASE_URI"] = config.DATABASE_URL
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False # saves overhead

db.init_app(app)
migrate = Migrate()
migrate.init_app(app, db)
login_manager = LoginManager(app)
login_manager.login_view = "login" # where anonymous users get sent

@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))

def session_context() -> SessionContext:
    # the logged-in user decides which slot we read and write
    return SessionContext(user_id=str(current_user.id), storage=DatabaseStorage(db))

def cursor_from_args() -> MonthCursor:
    year = request.args.get("year", type=int)
    month = request.args.get("month", type=int)
    day = request.args.get("day", type=int)

    if not year or not month:
        cursor = MonthCursor.today()
    else:
        try:
            cursor = MonthCursor(year, month)
        except ValueError:
            abort(404)

    if day:
        try:
            cursor = cursor.select(day)
        except ValueError:
            # day outside the month: show the month without a selection
            pass
    return cursor

def redirect_to_day(date_key: str | None):
    d = parse_date_key(date_key)
    if d is None:
        return redirect(url_for("index"))
    return redirect(url_for("index", year=d.year, month=d.month, day=d.day))

@app.route("/")
@login_required
def index():
    cursor = cursor_from_args()
    store = load_store(session_context())

    cells = build_grid(cursor.year, cursor.month)
    prev_cursor, next_cursor = cursor.neighbours()

    selected_events = []
    if cursor.selected_key:
        selected_events = [
            (ev, render_description(ev.description))
            for ev in store.events_for(cursor.selected_key)
        ]

    return render_template(
        "index.html",
        cursor=cursor,
        cells=cells,
        labels=weekday_labels(config.WEEK_START),
        event_days=store.dates_with_events(cursor.year, cursor.month),
        prev_cursor=prev_cursor,
        next_cursor=next_cursor,
        selected_events=selected_events,
        default_color=DEFAULT_EVENT_COLOR,
    )

# Login

@app.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "POST":
        username = request.form["username"]
        password = request.form["password"]

        user = User.query.filter_by(username=username).first()
        if user and user.check_password(password):
            login_user(user)
            return redirect(url_for("index"))
        flash("Wrong username or password.")
    return render_template("login.html")

# Registration

@app.route("/register", methods=["GET", "POST"])
def register():
    if request.method == "POST":
        username = request.form["username"].strip()
        password = request.form["password"]

        if not username or not password:
            flash("Username and password are required.")
            return redirect(url_for("register"))

        if User.query.filter_by(username=username).first():
            flash("That username is already taken.")
            return redirect(url_for("register"))

        user = User(username=username)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        flash("Registered. Please log in.")
        return redirect(url_for("login"))
    return render_template("register.html")

# Adding events

@app.route("/events", methods=["POST"])
@login_required
def add_event():
    title = request.form.get("title", "").strip()
    date_key = to_date_key(request.form.get("date", ""))

    if date_key is None:
        flash("Pick a valid day first.")
        return redirect(url_for("index"))
    if not title:
        flash("An event needs a title.")
        return redirect_to_day(date_key)

    ctx = session_context()
    store = load_store(ctx)
    if store.read_failed:
        flash("Your events could not be loaded, nothing was saved. Try again later.")
        return redirect_to_day(date_key)

    record = EventRecord(
        id=store.next_id(),
        title=title,
        date=date_key,
        time=request.form.get("time", "").strip() or None,
        place=request.form.get("place", "").strip() or None,
        description=request.form.get("description", "").strip() or None,
        color=normalize_hex(request.form.get("color")),
        owner=ctx.user_id,
    )
    store.add(record)

    if not save_store(store, ctx):
        flash("The event could not be saved, try again later.")
    return redirect_to_day(date_key)

# DELETE. HTML forms only do GET / POST, so POST stands in
@app.route("/events/<int:event_id>/delete", methods=["POST"])
@login_required
def delete_event(event_id):
    ctx = session_context()
    store = load_store(ctx)

    if store.read_failed:
        flash("Your events could not be loaded, nothing was deleted. Try again later.")
        return redirect(url_for("index"))

    removed = store.remove(event_id)
    if removed is None:
        return redirect(url_for("index"))

    if save_store(store, ctx):
        flash("Event deleted.")
    else:
        flash("The event could not be deleted, try again later.")
    return redirect_to_day(removed.date)

@app.route("/api/events/<date_key>")
@login_required
def events_json(date_key: str):
    if parse_date_key(date_key) is None:
        abort(404)
    store = load_store(session_context())
    return jsonify([ev.to_dict() for ev in store.events_for(date_key)])

@app.route("/api/grid")
@login_required
def grid_json():
    year = request.args.get("year", type=int)
    month = request.args.get("month", type=int)
    if not year or not month:
        today = date.fromisoformat(today_key())
        year, month = today.year, today.month
    try:
        cells = build_grid(year, month)
    except ValueError:
        abort(404)
    return jsonify({
        "year": year,
        "month": month,
        "cells": [cell.to_dict() for cell in cells],
    })

# Markdown preview
@app.route("/markdown_preview", methods=["POST"])
@login_required
def markdown_preview():
    data = request.get_json(silent=True) or {}
    text = data.get("text", "") or ""
    return jsonify({"html": render_description(text)})

@app.route("/logout")
@login_required
def logout():
    # only the session goes away, the user's events stay in their slot
    logout_user()
    return redirect(url_for("login"))

@app.cli.command("init-db")
def init_db():
    """Create the tables (use `flask db upgrade` once migrations are set up)."""
    db.create_all()
    logger.info("tables created")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True)
