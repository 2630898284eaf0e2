from hellobot.api.schemas.telegram import TelegramUser

DEFAULT_GREETING = "Hello there"


def build_greeting(user: TelegramUser | None) -> str:
    """Greet the sender as ``Hello @username first last``.

    Empty or missing profile fields are skipped; with nothing left the
    default greeting is used.
    """
    if user is None:
        return DEFAULT_GREETING

    parts: list[str] = []
    if user.username:
        parts.append(f"@{user.username}")
    if user.first_name:
        parts.append(user.first_name)
    if user.last_name:
        parts.append(user.last_name)

    info = " ".join(parts).strip()
    return f"Hello {info}" if info else DEFAULT_GREETING
