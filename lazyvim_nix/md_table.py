"""Utility for generating Markdown tables."""


def _cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def md_table(headers: list[str], rows: list[list[str]]) -> str:
    """Generate a Markdown table, escaping pipes inside cells."""
    if not rows:
        return ""
    out = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(["---"] * len(headers)) + " |",
    ]
    out.extend("| " + " | ".join(_cell(c) for c in r) + " |" for r in rows)
    return "\n".join(out)
