"""
Telegram message handler for the news curator.
"""

from telegram import Update
from telegram.ext import ContextTypes

from news_curation.tools import ToolResponse, curate_news, news_feedback, news_history, news_preferences
from util.logging_util import setup_logger

logger = setup_logger(__name__)

HELP_TEXT = """News commands:
news today - Show today's curated articles
news refresh - Run a fresh curation now
news like <id> [notes] - Thumbs up an article
news dislike <id> [notes] - Thumbs down an article
news prefs - Show your preferences
news history [days] - Show recent curation sessions"""


async def _reply(update: Update, text: str) -> None:
    await update.message.reply_text(text)


async def _send(update: Update, response: ToolResponse) -> None:
    if response.is_error:
        logger.warning(f"News command failed: {response.text.splitlines()[0]}")
    await _reply(update, response.text)


async def _handle_feedback(update: Update, args: list, liked: bool) -> None:
    if not args:
        await _reply(update, "Usage: news like <id> [notes]")
        return
    try:
        article_id = int(args[0])
    except ValueError:
        await _reply(update, f"'{args[0]}' is not an article ID")
        return

    notes = " ".join(args[1:]) or None
    await _send(update, news_feedback(article_id, liked, notes))


async def handle_news_command_async(
    update: Update, context: ContextTypes.DEFAULT_TYPE, command: str
) -> None:
    """Handle text-based news commands (news today, news like 3, etc.)."""
    parts = command.split()
    if not parts:
        await _reply(update, HELP_TEXT)
        return

    cmd = parts[0].lower()
    args = parts[1:]

    if cmd == "today":
        await _send(update, curate_news())
    elif cmd == "refresh":
        await _reply(update, "Starting curation...")
        await _send(update, curate_news(refresh=True))
    elif cmd in ("like", "dislike"):
        await _handle_feedback(update, args, liked=(cmd == "like"))
    elif cmd == "prefs":
        await _send(update, news_preferences("view"))
    elif cmd == "history":
        try:
            days = int(args[0]) if args else 7
        except ValueError:
            days = 7
        await _send(update, news_history(days))
    else:
        await _reply(update, HELP_TEXT)
