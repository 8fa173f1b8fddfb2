"""Rewrite scraped wiki fragments into self-contained HTML."""
from typing import NamedTuple

from bs4 import BeautifulSoup

from backend import config

LATEX_IMAGE_SELECTOR = "img.latex, img.latexcenter"


class NormalizedHtml(NamedTuple):
    html: str
    images: list[str]


def _absolute_url(src: str) -> str:
    if src.startswith("//"):
        return "https:" + src
    if src.startswith("/"):
        return config.AOPS_BASE_URL + src
    return src


def normalize_html(raw_html: str) -> NormalizedHtml:
    """Inline LaTeX image sources and make image and link URLs absolute.

    The wiki renders inline math as <img class="latex" alt="$...$">. Putting
    the alt text back lets the client re-render it as live math. Asymptote
    diagrams ([asy] alt text) stay as images.

    Returns:
        The normalized markup and the distinct image URLs in document order.
    """
    soup = BeautifulSoup(f"<div>{raw_html}</div>", "lxml")
    wrapper = soup.find("div")

    for img in wrapper.select(LATEX_IMAGE_SELECTOR):
        alt = img.get("alt")
        if alt and not alt.strip().startswith("[asy]"):
            span = soup.new_tag("span")
            span.string = f" {alt} "
            img.replace_with(span)

    images: list[str] = []
    for img in wrapper.find_all("img"):
        src = img.get("src")
        if not src:
            continue
        src = _absolute_url(src)
        img["src"] = src
        if src not in images:
            images.append(src)

    for link in wrapper.find_all("a", href=True):
        href = link["href"]
        link["href"] = _absolute_url(href)
        # Only wiki-internal links open in a new tab
        if href.startswith("/") and not href.startswith("//"):
            link["target"] = "_blank"

    return NormalizedHtml(html=wrapper.decode_contents(), images=images)
