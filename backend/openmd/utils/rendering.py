import markdown

_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def render_markdown(text: str) -> str:
    # not sanitized: raw HTML in the source passes through
    return markdown.markdown(text or "", extensions=_EXTENSIONS)
