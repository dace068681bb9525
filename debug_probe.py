import argparse
import time
from typing import Optional, Tuple

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from emoji_import.browser import VIEWPORT, _close_quietly, _launch_browser, capture_debug
from emoji_import.config import normalize_host
from emoji_import.selectors import SELECTORS, customize_url

DEFAULT_SELECTORS = {
    "email": SELECTORS["SIGNIN"]["email"],
    "add_button": SELECTORS["EMOJI"]["add_button"],
    "file_input": SELECTORS["EMOJI"]["file_input"],
    "name": SELECTORS["EMOJI"]["name"],
    "save_button": SELECTORS["EMOJI"]["save_button"],
}

# Slack renders the emoji admin client-side
RENDER_WAIT_MS = 2000
SELECTOR_WAIT_MS = 20000

HIGHLIGHT_JS = """(el) => {
    el.scrollIntoView({behavior:'instant', block:'center'});
    el.style.outline = '4px solid magenta';
    el.style.background = 'rgba(255,0,255,0.08)';
}"""


def check_selector(page, selector: str) -> Tuple[int, Optional[str]]:
    """Count matches for selector, outline the first one and return its text."""
    print(f"[+] wait_for_selector: {selector}")
    try:
        page.wait_for_selector(selector, timeout=SELECTOR_WAIT_MS)
    except PlaywrightError as e:
        print(f"[!] selector not found: {e}")

    matches = page.locator(selector)
    count = matches.count()
    print(f"[+] matched count = {count}")
    if count == 0:
        return 0, None

    first = matches.first
    first.evaluate(HIGHLIGHT_JS)
    text = first.inner_text().strip()
    print(f"[+] inner_text: {text}")
    return count, text


def main(argv=None):
    ap = argparse.ArgumentParser(description="Check Slack emoji page selectors against the live UI")
    ap.add_argument("--host", required=True)
    ap.add_argument("--target", default="add_button", choices=sorted(DEFAULT_SELECTORS))
    ap.add_argument("--selector", default=None, help="override the selector for --target")
    ap.add_argument("--state", default=None, help="stored session file, so the emoji page is reachable")
    ap.add_argument("--channel", default="", help="browser channel, e.g. chrome or msedge")
    ap.add_argument("--headful", action="store_true")
    ap.add_argument("--slowmo", type=int, default=250)  # ms
    ap.add_argument("--timeout", type=int, default=45000)
    ap.add_argument("--pause", action="store_true", help="pause with Playwright inspector")
    ap.add_argument("--out", default="debug_out", help="folder for screenshots/html")
    args = ap.parse_args(argv)

    selector = args.selector or DEFAULT_SELECTORS[args.target]
    url = customize_url(normalize_host(args.host))

    with sync_playwright() as p:
        browser = _launch_browser(p, headful=args.headful, channel=args.channel, slowmo_ms=args.slowmo)
        ctx_kwargs = {"viewport": dict(VIEWPORT)}
        if args.state:
            ctx_kwargs["storage_state"] = args.state
        context = browser.new_context(**ctx_kwargs)
        try:
            page = context.new_page()
            print(f"[+] goto: {url}")
            page.goto(url, wait_until="domcontentloaded", timeout=args.timeout)
            page.wait_for_timeout(RENDER_WAIT_MS)

            count, _ = check_selector(page, selector)

            shot = capture_debug(page, args.out, args.target)
            if shot is not None:
                print(f"[+] wrote {shot} and {shot.with_suffix('.html')}")

            if args.pause:
                page.pause()
            elif args.headful:
                print("[i] keeping browser open for 10 seconds...")
                time.sleep(10)
        finally:
            _close_quietly(context)
            _close_quietly(browser)
    return count


if __name__ == "__main__":
    main()
