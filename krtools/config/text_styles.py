from rich.highlighter import RegexHighlighter

## Colors

COLOR_EMPH = "bright_green"

COLOR_HINT = "bright_black"

COLOR_KEY = "bright_blue"

COLOR_PATH = "cyan"

COLOR_URL = "underline cyan"


## Symbols

EMOJI_WARN = "△"

EMOJI_ERROR = EMOJI_WARN + EMOJI_WARN


RICH_STYLES = {
    "kr.url": COLOR_URL,
    "kr.flag": COLOR_KEY,
    "kr.quoted": COLOR_PATH,
}


class KrHighlighter(RegexHighlighter):
    """
    Highlights URLs, `--flags` and quoted values in log lines.
    """

    base_style = "kr."
    highlights = [
        r"(?P<url>https?://[^\s']+)",
        r"(?P<flag>(?<![\w-])--[\w-]+)",
        r"(?P<quoted>'[^']*')",
    ]
