"""
Matching of externally reported solved problems against local questions.

Upstream judge APIs answer in several shapes. Each known shape has one parser;
parsers are tried in a fixed order and the first that recognizes the payload
produces a tagged result (``SolvedList``, ``StatsOnly`` or ``Unrecognized``).
Matching itself is pure and never touches the database.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from practice_tracker.models import Question

logger = logging.getLogger(__name__)

_PROBLEMS_MARKER = "/problems/"
_TRAILING_NUMERIC_ID = re.compile(r"(?:-\d+)+$")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")

GFG_DIFFICULTY_BUCKETS = ("school", "basic", "easy", "medium", "hard")


def _problem_segment(value: str) -> str:
    """Path segment after ``/problems/``, cut at the next separator. A bare slug is its own segment."""
    if _PROBLEMS_MARKER in value:
        value = value.split(_PROBLEMS_MARKER, 1)[1]
    elif "//" in value or "/" in value.strip("/") or "." in value:
        # a URL or host that is not a problem page names no problem
        return ""
    for sep in ("/", "?", "#"):
        value = value.split(sep, 1)[0]
    return value.strip().lower()


def canonical_problem_id(value: Optional[str]) -> Optional[str]:
    """
    Canonical identifier of a problem URL or slug.

    ``https://www.geeksforgeeks.org/problems/two-sum-1587115620/1`` and
    ``https://www.geeksforgeeks.org/problems/two-sum/`` both give ``two-sum``.
    Applying it to its own output returns the same string.
    A full URL that is not a problem page gives ``None``.
    """
    if not value:
        return None
    identifier = _TRAILING_NUMERIC_ID.sub("", _problem_segment(value))
    return identifier or None


def extract_leetcode_slug(link: Optional[str]) -> Optional[str]:
    if not link or _PROBLEMS_MARKER not in link:
        return None
    return _problem_segment(link) or None


def normalize_title(title: Optional[str]) -> str:
    """``"Two Sum II - Input Array Is Sorted"`` -> ``"two-sum-ii-input-array-is-sorted"``"""
    return _NON_ALNUM_RUN.sub("-", (title or "").lower()).strip("-")


# --- parsed payloads -------------------------------------------------------------------

@dataclass
class SolvedEntry:
    title: str = ""
    title_slug: str = ""

    @property
    def slug(self) -> str:
        return (self.title_slug or "").strip().lower() or normalize_title(self.title)

    @property
    def normalized_title(self) -> str:
        return normalize_title(self.title) or self.slug

    @property
    def key(self) -> str:
        return self.slug or self.normalized_title


@dataclass
class SolvedList:
    source: str
    entries: List[SolvedEntry] = field(default_factory=list)
    urls: List[str] = field(default_factory=list)
    total_solved: Optional[int] = None


@dataclass
class StatsOnly:
    source: str
    total_solved: Optional[int] = None


@dataclass
class Unrecognized:
    keys: List[str] = field(default_factory=list)


ParsedPayload = Union[SolvedList, StatsOnly, Unrecognized]
PayloadParser = Callable[[Dict[str, Any]], Optional[ParsedPayload]]


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _entries_from(items: Any, accepted_only: bool = False) -> List[SolvedEntry]:
    entries = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        if accepted_only and item.get("statusDisplay") not in (None, "Accepted"):
            continue
        title, slug = item.get("title") or "", item.get("titleSlug") or ""
        if title or slug:
            entries.append(SolvedEntry(title=str(title), title_slug=str(slug)))
    return entries


def _parse_leetcode_submission_list(payload: Dict[str, Any]) -> Optional[ParsedPayload]:
    for key in ("submission", "solvedProblems"):
        items = payload.get(key)
        if isinstance(items, list):
            total = _as_int(payload.get("count", payload.get("solvedProblem")))
            return SolvedList(source=key, entries=_entries_from(items, accepted_only=True),
                              total_solved=total if total is not None else len(items))
    return None


def _leetcode_accepted_total(stats: Any) -> Optional[int]:
    if not isinstance(stats, dict):
        return None
    for bucket in stats.get("acSubmissionNum") or []:
        if isinstance(bucket, dict) and bucket.get("difficulty") == "All":
            return _as_int(bucket.get("count"))
    return None


def _parse_leetcode_graphql(payload: Dict[str, Any]) -> Optional[ParsedPayload]:
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    matched_user = data.get("matchedUser") if isinstance(data.get("matchedUser"), dict) else {}
    total = _leetcode_accepted_total(data.get("submitStats") or matched_user.get("submitStats"))
    items = data.get("recentAcSubmissionList")
    if items is None:
        items = data.get("recentSubmissionList")
    if isinstance(items, list):
        return SolvedList(source="data.recentAcSubmissionList",
                          entries=_entries_from(items, accepted_only=True), total_solved=total)
    if "submitStats" in data or "submitStats" in matched_user:
        return StatsOnly(source="data.submitStats", total_solved=total)
    return None


def _parse_leetcode_recent_submissions(payload: Dict[str, Any]) -> Optional[ParsedPayload]:
    items = payload.get("recentSubmissions")
    if not isinstance(items, list):
        return None
    return SolvedList(source="recentSubmissions", entries=_entries_from(items, accepted_only=True),
                      total_solved=_as_int(payload.get("totalSolved")))


def _parse_leetcode_stats(payload: Dict[str, Any]) -> Optional[ParsedPayload]:
    for key in ("totalSolved", "solvedProblem", "easySolved"):
        if key in payload:
            return StatsOnly(source=key, total_solved=_as_int(payload.get("totalSolved", payload.get("solvedProblem"))))
    return None


LEETCODE_PARSERS: Sequence[PayloadParser] = (
    _parse_leetcode_submission_list,
    _parse_leetcode_graphql,
    _parse_leetcode_recent_submissions,
    _parse_leetcode_stats,
)


def _parse_gfg_solved_stats(payload: Dict[str, Any]) -> Optional[ParsedPayload]:
    solved_stats = payload.get("solvedStats")
    if not isinstance(solved_stats, dict):
        return None
    urls = []
    for bucket in GFG_DIFFICULTY_BUCKETS:
        stats = solved_stats.get(bucket)
        if not isinstance(stats, dict):
            continue
        for question in stats.get("questions") or []:
            if isinstance(question, dict) and question.get("questionUrl"):
                urls.append(question["questionUrl"])
    info = payload.get("info")
    total = _as_int(info.get("totalProblemsSolved")) if isinstance(info, dict) else None
    return SolvedList(source="solvedStats", urls=urls, total_solved=total if total is not None else len(urls))


def _parse_gfg_practice_result(payload: Dict[str, Any]) -> Optional[ParsedPayload]:
    # {"result": {"Easy": {"<id>": {"slug": "...", "pname": "..."}}}}
    result = payload.get("result")
    if not isinstance(result, dict):
        return None
    urls = []
    for problems in result.values():
        if not isinstance(problems, dict):
            continue
        for problem in problems.values():
            if isinstance(problem, dict) and problem.get("slug"):
                urls.append(f"https://www.geeksforgeeks.org/problems/{problem['slug']}/1")
    return SolvedList(source="result", urls=urls, total_solved=_as_int(payload.get("count")) or len(urls))


GFG_PARSERS: Sequence[PayloadParser] = (
    _parse_gfg_solved_stats,
    _parse_gfg_practice_result,
)


def parse_payload(payload: Any, parsers: Iterable[PayloadParser]) -> ParsedPayload:
    if not isinstance(payload, dict):
        return Unrecognized()
    for parser in parsers:
        parsed = parser(payload)
        if parsed is not None:
            return parsed
    return Unrecognized(keys=sorted(payload.keys()))


def parse_leetcode_payload(payload: Any) -> ParsedPayload:
    return parse_payload(payload, LEETCODE_PARSERS)


def parse_gfg_payload(payload: Any) -> ParsedPayload:
    return parse_payload(payload, GFG_PARSERS)


# --- matching --------------------------------------------------------------------------

def match_gfg_questions(local_questions: Iterable[Question], solved_urls: Iterable[str]) -> List[Question]:
    solved_ids = {pid for pid in (canonical_problem_id(url) for url in solved_urls) if pid}
    return [q for q in local_questions if canonical_problem_id(q.link) in solved_ids]


def dedupe_entries(entries: Iterable[SolvedEntry]) -> List[SolvedEntry]:
    seen, unique = set(), []
    for entry in entries:
        if not entry.key or entry.key in seen:
            continue
        seen.add(entry.key)
        unique.append(entry)
    return unique


class MatchStrategy(str, Enum):
    slug = "slug"
    slug_in_title = "slug_in_title"
    title = "title"
    local_title_in_remote = "local_title_in_remote"
    remote_title_in_local = "remote_title_in_local"


PARTIAL_STRATEGIES = frozenset({
    MatchStrategy.slug_in_title,
    MatchStrategy.local_title_in_remote,
    MatchStrategy.remote_title_in_local,
})


@dataclass
class LeetCodeMatch:
    question: Question
    entry: SolvedEntry
    strategy: MatchStrategy

    @property
    def is_partial(self) -> bool:
        return self.strategy in PARTIAL_STRATEGIES


def _contains(needle: Optional[str], haystack: Optional[str]) -> bool:
    return bool(needle) and bool(haystack) and needle in haystack


def _strategy_tests(local_slug: Optional[str], local_title: str):
    return (
        (MatchStrategy.slug, lambda e: bool(local_slug) and local_slug == e.slug),
        (MatchStrategy.slug_in_title, lambda e: _contains(local_slug, e.normalized_title)),
        (MatchStrategy.title, lambda e: bool(local_title) and local_title == e.normalized_title),
        (MatchStrategy.local_title_in_remote, lambda e: _contains(local_title, e.normalized_title)),
        (MatchStrategy.remote_title_in_local, lambda e: _contains(e.normalized_title, local_title)),
    )


def match_leetcode_question(question: Question, entries: Sequence[SolvedEntry],
                            allow_partial: bool = True) -> Optional[LeetCodeMatch]:
    """Strongest strategy wins; substring strategies run only when ``allow_partial``."""
    local_slug = extract_leetcode_slug(question.link)
    local_title = normalize_title(question.name)
    for strategy, test in _strategy_tests(local_slug, local_title):
        if strategy in PARTIAL_STRATEGIES and not allow_partial:
            continue
        for entry in entries:
            if test(entry):
                return LeetCodeMatch(question=question, entry=entry, strategy=strategy)
    return None


def match_leetcode_questions(local_questions: Iterable[Question], entries: Iterable[SolvedEntry],
                             allow_partial: bool = True) -> List[LeetCodeMatch]:
    unique = dedupe_entries(entries)
    matches = []
    for question in local_questions:
        match = match_leetcode_question(question, unique, allow_partial)
        if match is None:
            continue
        if match.is_partial:
            logger.warning("Partial LeetCode match (%s): question %s %r <- solved %r",
                           match.strategy.value, question.id, question.name, match.entry.title or match.entry.slug)
        matches.append(match)
    return matches
