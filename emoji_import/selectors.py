from __future__ import annotations

from urllib.parse import quote

SELECTORS = {
    "SIGNIN": {
        "email": "#signin_form input[type=email]",
        "password": "#signin_form input[type=password]",
        "submit": "#signin_form #signin_btn",
    },
    "EMOJI": {
        "add_button": ".p-customize_emoji_wrapper__custom_button",
        "file_input": "input#emojiimg",
        "name": "#emojiname",
        "save_button": ".c-sk-modal_footer_actions .c-button--primary",
    },
}

CUSTOMIZE_PATH = "/customize/emoji"


def customize_url(host: str) -> str:
    return f"https://{host}.slack.com/?redir={quote(CUSTOMIZE_PATH, safe='')}"
