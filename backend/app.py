import hmac
import logging
import os

import click
from flask import Flask, request, jsonify
from flask_cors import CORS

from commands import JournalBot
from config import Config
from gpt_service import CompletionClient
from models import db, JournalEntry, enable_sqlite_savepoints, utcnow
from reminders import send_daily_reminders
from telegram_service import PacedSender, TelegramClient


def build_bot(config) -> JournalBot:
    client = TelegramClient(config["TELEGRAM_BOT_TOKEN"], timeout=config["HTTP_TIMEOUT"])
    sender = PacedSender(client, rate=config["SEND_RATE"], burst=config["SEND_BURST"])
    return JournalBot(sender, CompletionClient.from_config(config))


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Init DB
    db.init_app(app)
    with app.app_context():
        enable_sqlite_savepoints(db.engine)
        db.create_all()

    # --- CORS for the read-only entries API ---
    frontend_origin = app.config["FRONTEND_ORIGIN"]
    if frontend_origin:
        CORS(app, resources={r"/entries": {"origins": [frontend_origin]}})
    else:
        # Dev fallback: allow all (ok for local dev; tighten for prod)
        CORS(app)

    app.extensions["journal_bot"] = build_bot(app.config)

    # ---------- Routes ----------

    @app.route("/health")
    def health():
        """Simple health check + DB connectivity test."""
        db_ok = True
        try:
            with db.engine.connect() as conn:
                conn.execute(db.text("SELECT 1"))
        except Exception:
            app.logger.exception("health check: database unreachable")
            db_ok = False
        return jsonify({
            "ok": True,
            "db_ok": db_ok,
            "model": app.config["OPENAI_MODEL"],
            "time": utcnow().isoformat() + "Z"
        }), 200

    @app.route("/webhook", methods=["POST"])
    def telegram_webhook():
        """One Telegram update per call: dispatch its text to the bot."""
        secret = app.config["TELEGRAM_WEBHOOK_SECRET"]
        if secret and request.headers.get("X-Telegram-Bot-Api-Secret-Token") != secret:
            return jsonify({"error": "forbidden"}), 403

        update = request.get_json(silent=True) or {}
        message = update.get("message") or {}
        chat_id = (message.get("chat") or {}).get("id")
        text = message.get("text")
        if chat_id is None or not text:
            # Stickers, edits, joins... nothing to journal.
            return jsonify({"ok": True, "ignored": True}), 200

        app.extensions["journal_bot"].handle(chat_id, text)
        return jsonify({"ok": True}), 200

    @app.route("/entries", methods=["GET"])
    def list_entries():
        """List a chat's entries (latest first)."""
        token = app.config["API_TOKEN"]
        supplied = request.headers.get("Authorization", "").removeprefix("Bearer ").strip()
        if not token or not hmac.compare_digest(supplied.encode(), token.encode()):
            return jsonify({"error": "forbidden"}), 403

        chat_id = (request.args.get("chat_id") or "").strip()
        if not chat_id:
            return jsonify({"error": "Missing 'chat_id'"}), 400
        items = (
            JournalEntry.query
            .filter_by(chat_id=chat_id)
            .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
            .all()
        )
        return jsonify([it.to_dict() for it in items]), 200

    @app.cli.command("send-reminders")
    def send_reminders_command():
        """Send the daily journaling reminder to every known chat."""
        count = send_daily_reminders(app.extensions["journal_bot"].sender)
        click.echo(f"Sent reminders to {count} chats.")

    return app


if __name__ == "__main__":
    create_app().run(
        host="0.0.0.0",
        port=int(os.getenv("PORT", "5000")),
        debug=True
    )
