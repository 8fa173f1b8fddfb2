"""Split an AoPS wiki problem page into question and solution markup."""
import html
from typing import NamedTuple, Optional

from bs4 import BeautifulSoup, Tag

from backend.scraper.errors import ContentNotFoundError, NoQuestionContentError

CONTENT_ROOT_SELECTOR = ".mw-parser-output"
REDIRECT_NOTICES = ("following problem is from", "redirects to this page")
SOLUTION_PLACEHOLDER = "<p>Solution parsing failed.</p>"


class Segments(NamedTuple):
    question_html: str
    solution_html: str


def _strip_notices(content: Tag) -> None:
    """Drop the table of contents and cross-reference notices."""
    for toc in content.select(".toc, #toc"):
        toc.decompose()
    for dl in content.find_all("dl"):
        text = dl.get_text()
        if any(notice in text for notice in REDIRECT_NOTICES):
            dl.decompose()


def _section_heading(tag: Tag) -> Optional[Tag]:
    """Return the h2 a sibling represents, if any.

    Newer MediaWiki wraps headings as <div class="mw-heading mw-heading2"><h2>.
    """
    if tag.name == "h2":
        return tag
    if tag.name == "div" and "mw-heading2" in (tag.get("class") or []):
        return tag.find("h2")
    return None


def _heading_id(heading: Tag) -> str:
    if heading.get("id"):
        return heading["id"]
    headline = heading.select_one(".mw-headline")
    if headline is not None and headline.get("id"):
        return headline["id"]
    return ""


def _is_problem_heading(heading: Tag) -> bool:
    return (
        heading.get("id") == "Problem"
        or heading.get_text(strip=True) == "Problem"
        or heading.find(id="Problem") is not None
    )


def _find_start(content: Tag) -> Optional[Tag]:
    for child in content.find_all(True, recursive=False):
        heading = _section_heading(child)
        if heading is not None and _is_problem_heading(heading):
            return child.find_next_sibling()
    return content.find(True, recursive=False)


def segment_document(soup: BeautifulSoup) -> Segments:
    """Walk the content root's children and accumulate question and solution HTML.

    The walk starts right after the "Problem" heading (or at the first child),
    switches to the solution on any "Solution" h2 and stops at "See also".
    Headings that trigger a transition are never copied; each solution
    heading is re-emitted as an h3.

    Raises:
        ContentNotFoundError: the page has no .mw-parser-output root.
        NoQuestionContentError: nothing was collected for the question.
    """
    content = soup.select_one(CONTENT_ROOT_SELECTOR)
    if content is None:
        raise ContentNotFoundError("Could not find content (.mw-parser-output)")

    _strip_notices(content)

    mode = "question"
    question_parts: list[str] = []
    solution_parts: list[str] = []

    current = _find_start(content)
    while current is not None:
        heading = _section_heading(current)
        if heading is not None:
            text = heading.get_text()
            heading_id = _heading_id(heading)
            if "Solution" in text or "Solution" in heading_id:
                mode = "solution"
                title = html.escape(heading.get_text(strip=True))
                solution_parts.append(f'<h3 class="solution-heading">{title}</h3>')
                current = current.find_next_sibling()
                continue
            if "See also" in text or "See Also" in text or "See_also" in heading_id or "See_Also" in heading_id:
                break

        if mode == "question":
            question_parts.append(str(current))
        else:
            solution_parts.append(str(current))
        current = current.find_next_sibling()

    question_html = "".join(question_parts)
    if not question_html.strip():
        raise NoQuestionContentError("No question content found")

    return Segments(
        question_html=question_html,
        solution_html="".join(solution_parts) or SOLUTION_PLACEHOLDER,
    )
