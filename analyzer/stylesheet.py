"""
Stylesheet synthesis for generated CSS fixes.

Renders a CSSFixSet into a single CSS text blob and provides the page-side
helpers that inject or remove it as one <style> node with a fixed id, so
the fixes can be toggled on a previewed document.
"""

from typing import Optional

from playwright.async_api import Page

from models import CSSFixSet

STYLESHEET_ELEMENT_ID = "responsive-fixes"

# Inserts, replaces or (css === null) removes the fixes stylesheet.
TOGGLE_STYLESHEET_SCRIPT = """
([id, css]) => {
    const existing = document.getElementById(id);
    if (css === null) {
        if (existing) existing.remove();
        return false;
    }
    const style = existing || document.createElement('style');
    style.id = id;
    style.textContent = css;
    if (!existing) (document.head || document.documentElement).appendChild(style);
    return true;
}
"""


def render_stylesheet(url: str, width: int, height: int, fix_set: CSSFixSet) -> str:
    """
    Render fixes and media queries into one stylesheet.

    Output depends only on the arguments, in the order given: a header
    comment, one commented rule block per fix, then one @media block per
    media query with its nested rules.
    """
    header = (
        f"/* Generated fixes for {url} */\n"
        f"/* Device: {width}x{height} */\n"
        "/* These fixes are meant to be applied via a separate stylesheet */\n"
    )

    fix_blocks = [
        f"/* {fix.description} */\n"
        f"/* Impact: {fix.impact} */\n"
        f"{fix.selector} {{\n"
        f"  {fix.css}\n"
        "}"
        for fix in fix_set.fixes
    ]

    media_blocks = []
    for media_query in fix_set.media_queries:
        rules = "\n".join(
            f"  {rule.selector} {{\n"
            f"    {rule.css}\n"
            "  }"
            for rule in media_query.rules
        )
        media_blocks.append(f"@media {media_query.query} {{\n{rules}\n}}")

    sections = [header]
    if fix_blocks:
        sections.append("\n\n".join(fix_blocks) + "\n")
    if media_blocks:
        sections.append("\n\n".join(media_blocks) + "\n")
    return "\n".join(sections)


def injection_script() -> str:
    """
    JS taking ``[id, css]``; run it in any document (preview iframe or
    Playwright page) to toggle the fixes stylesheet.
    """
    return TOGGLE_STYLESHEET_SCRIPT


async def set_stylesheet(page: Page, css: Optional[str]) -> bool:
    """
    Enable (css given) or disable (css None) the fixes stylesheet on a page.

    Returns True when the stylesheet is present afterwards.
    """
    return await page.evaluate(injection_script(), [STYLESHEET_ELEMENT_ID, css])
