"""
Case summarizer.

Generates the 60-word TL;DR, the five-minute brief, key quotes and practice
area tags for a case through an LLM provider. Provider output is free text;
the parsers here pull out whatever structure they recognise and leave the
rest empty. Without a provider, or when it fails, a canned template is used.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from .normalize import generate_case_id
from .utils.base import BaseFetcher
from .utils.data_models import BRIEF_SECTIONS, Brief5Min, CaseRecord, KeyQuote
from .utils.exceptions import ParsingError, PipelineError, ValidationError
from .utils.helpers import day_key, setup_logger, utc_now

logger = setup_logger("five_min_case.summarizer")

TLDR_PROMPT = """You are 5 Min Case AI. Your personality is sharp, witty, and conversational, like a senior lawyer explaining a ruling to a junior over coffee.

Generate a TL;DR in EXACTLY 60 words following this format:
[WHO] held that [WHAT] because [WHY]. This means [PRACTICAL IMPACT].

Rules:
- Use plain English, NO legal jargon
- Lead with the most important holding
- Be specific about the impact"""

BRIEF_PROMPT = """You are 5 Min Case AI. Create a structured 5-minute brief that a tired lawyer can understand quickly.

Structure:
1. FACTS: What happened? (2-3 sentences max)
2. ISSUES: What legal questions did the court answer? (1-2 bullet points)
3. HOLDING: Court's answer in one clear sentence
4. REASONING: Why did the court decide this way? (2-3 sentences)
5. DISPOSITION: What happens next? (1 sentence)

Rules:
- NO legal jargon
- If a statute is cited, explain briefly what it does"""

KEY_QUOTES_PROMPT = """Extract 2-3 powerful quotes from this judgment that lawyers would highlight.

Rules:
- Put each quote in double quotes
- Include the paragraph reference if available, e.g. (para 12)
- Avoid procedural language"""

TAGS_PROMPT = """Identify 2-3 practice areas for this case.

Common tags: Criminal Procedure, Constitutional, Commercial, Arbitration, IPR, Data Protection,
Administrative, Tax, Labour, Family, Property, Torts, Contract, Media, Banking, Insurance,
Environmental, Competition, Securities

Return only the relevant tags as a comma-separated list."""

SECTION_WORDS = {
    "facts": r"facts?",
    "issues": r"issues?",
    "holding": r"holdings?",
    "reasoning": r"reasoning",
    "disposition": r"disposition",
}

# A pin is "(12)", "(para 12)", "¶12" or "para 12" on the same line as the quote
QUOTE_PATTERN = re.compile(
    r'"([^"]+)"'
    r"(?:[ \t]*(?:\(\s*(?:¶|paragraph|paras?\.?)?\s*(\d+)\s*\)|(?:¶|paragraph|paras?\.?)\s*(\d+)))?",
    re.IGNORECASE,
)
MAX_QUOTES = 3


@dataclass
class CaseSummary:
    tldr60: str = ""
    brief5min: Brief5Min = field(default_factory=Brief5Min)
    key_quotes: List[KeyQuote] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


class SummaryProvider(ABC):
    """Anything that turns a prompt into text."""

    name = "provider"

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Raises:
            PipelineError: If the provider call fails
        """
        pass


class GeminiProvider(BaseFetcher, SummaryProvider):
    """Google Gemini over the ``generateContent`` REST endpoint."""

    name = "gemini"

    def __init__(self, api_key: str, model: str = "gemini-1.5-flash", **kwargs):
        kwargs.setdefault("request_delay", 1.0)
        super().__init__(**kwargs)
        if not api_key:
            raise ValueError("A Gemini API key is required")
        self.model = model
        self.session.headers.update(
            {"x-goog-api-key": api_key, "Content-Type": "application/json"}
        )

    @property
    def base_url(self) -> str:
        return "https://generativelanguage.googleapis.com/v1beta"

    def generate(self, prompt: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            data = self._get_json(
                url, method="POST", json={"contents": [{"parts": [{"text": prompt}]}]}
            )
        finally:
            self._pause()
        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts).strip()
        except (KeyError, IndexError, TypeError) as e:
            raise ParsingError(f"Unexpected Gemini response: {str(e)}", url=url) from e


class PerplexityProvider(BaseFetcher, SummaryProvider):
    """Perplexity chat completions."""

    name = "perplexity"

    def __init__(self, api_key: str, model: str = "sonar-pro", **kwargs):
        kwargs.setdefault("request_delay", 1.0)
        super().__init__(**kwargs)
        if not api_key:
            raise ValueError("A Perplexity API key is required")
        self.model = model
        self.session.headers.update(
            {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        )

    @property
    def base_url(self) -> str:
        return "https://api.perplexity.ai"

    def generate(self, prompt: str) -> str:
        url = f"{self.base_url}/chat/completions"
        try:
            data = self._get_json(
                url,
                method="POST",
                json={"model": self.model, "messages": [{"role": "user", "content": prompt}]},
            )
        finally:
            self._pause()
        try:
            return data["choices"][0]["message"]["content"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ParsingError(f"Unexpected Perplexity response: {str(e)}", url=url) from e


def _section_pattern(word: str):
    # A label at the start of a line, after any numbering or markdown
    return re.compile(rf"^[ \t#>*_\-\d.)]*{word}[ \t*_]*:[ \t*_]*", re.IGNORECASE | re.MULTILINE)


def parse_brief_sections(text: str) -> Brief5Min:
    """
    Split a brief into its five sections.

    Labels are looked for in the fixed order facts, issues, holding,
    reasoning, disposition; each section runs to the next recognised label.
    Sections that cannot be found stay empty.
    """
    brief = Brief5Min()
    if not text:
        return brief

    found = []
    position = 0
    for name in BRIEF_SECTIONS:
        match = _section_pattern(SECTION_WORDS[name]).search(text, position)
        if match:
            found.append((name, match.start(), match.end()))
            position = match.end()

    for i, (name, _, end) in enumerate(found):
        stop = found[i + 1][1] if i + 1 < len(found) else len(text)
        setattr(brief, name, text[end:stop].strip())
    return brief


def parse_key_quotes(text: str) -> List[KeyQuote]:
    """Pull up to three double-quoted passages, with ``¶N`` pins when given."""
    if not text:
        return []
    text = re.sub("[“”]", '"', text)

    quotes = []
    for match in QUOTE_PATTERN.finditer(text):
        quote = match.group(1).strip()
        if not quote:
            continue
        number = match.group(2) or match.group(3)
        pin = f"¶{number}" if number else None
        quotes.append(KeyQuote(quote=quote, pin=pin))
        if len(quotes) == MAX_QUOTES:
            break
    return quotes


def parse_tags(text: str) -> List[str]:
    tags = []
    for raw in re.split(r"[,\n]", text or ""):
        tag = raw.strip().strip("-*•").strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def template_summary() -> CaseSummary:
    """Canned summary used when no provider is available."""
    return CaseSummary(
        tldr60=(
            "Court ruled that AI-generated legal summaries require human review before "
            "reliance. Automated tools can assist but cannot replace lawyer judgment. "
            "Sanctions possible for unchecked AI submissions. This means lawyers must "
            "verify AI output before filing, treating it like junior associate work "
            "requiring supervision."
        ),
        brief5min=Brief5Min(
            facts=(
                "Law firm submitted AI-generated brief with hallucinated cases. Opposing "
                "counsel discovered fake citations. Court sanctioned firm for lack of diligence."
            ),
            issues=(
                "Whether lawyers can rely on AI tools without verification. What level of "
                "review satisfies professional duties."
            ),
            holding=(
                "Lawyers remain fully responsible for AI-generated content and must verify "
                "all citations and arguments."
            ),
            reasoning=(
                "Professional responsibility rules require personal knowledge of filing "
                "contents. AI tools are assistants, not replacements for legal judgment."
            ),
            disposition="Sanctions imposed; brief stricken; leave to refile with verified content.",
        ),
        key_quotes=[
            KeyQuote("AI is a tool, not a lawyer. The professional using it remains accountable.", "¶45"),
            KeyQuote("Technological efficiency cannot compromise accuracy or candor before this Court.", "¶62"),
        ],
        tags=["Professional Responsibility", "Legal Tech", "Litigation"],
    )


class CaseSummarizer:
    """Fills the summary fields of cases using a provider."""

    def __init__(self, provider: Optional[SummaryProvider] = None):
        self.provider = provider
        self.logger = setup_logger(self.__class__.__name__)

    def _case_header(self, record: CaseRecord) -> str:
        return (
            f"Case: {record.parties.title}\nCourt: {record.court}\n"
            f"Date: {record.date}\nURL: {record.url}"
        )

    def generate_summary(self, record: CaseRecord) -> CaseSummary:
        """
        Ask the provider for each part of the summary.

        Raises:
            PipelineError: If any provider call fails
        """
        header = self._case_header(record)
        tldr = self.provider.generate(f"{TLDR_PROMPT}\n\n{header}").strip()
        brief_text = self.provider.generate(f"{BRIEF_PROMPT}\n\n{header}\nTL;DR: {tldr}")
        quotes_text = self.provider.generate(
            f"{KEY_QUOTES_PROMPT}\n\nCase: {record.parties.title}\nCourt: {record.court}"
        )
        tags_text = self.provider.generate(
            f"{TAGS_PROMPT}\n\nCase: {record.parties.title}\nTL;DR: {tldr}"
        )
        return CaseSummary(
            tldr60=tldr,
            brief5min=parse_brief_sections(brief_text),
            key_quotes=parse_key_quotes(quotes_text),
            tags=parse_tags(tags_text),
        )

    def summarize(self, record: CaseRecord) -> CaseRecord:
        """Summarize a case in place and return it."""
        self.logger.info(f"Processing: {record.parties.title}")

        if self.provider is None:
            summary = template_summary()
        else:
            try:
                summary = self.generate_summary(record)
            except PipelineError as e:
                self.logger.error(
                    f"{self.provider.name} generation failed, using template: {str(e)}"
                )
                summary = template_summary()

        if not record.id:
            record.id = generate_case_id(record.date, record.court)
        record.tldr60 = summary.tldr60
        record.brief5min = summary.brief5min
        record.key_quotes = summary.key_quotes
        record.tags = summary.tags
        return record


def raw_file_for(raw_dir: Union[str, Path], now: datetime) -> Path:
    return Path(raw_dir) / f"{day_key(now)}-raw.json"


def cases_file_for(cases_dir: Union[str, Path], now: datetime) -> Path:
    today = day_key(now)
    return Path(cases_dir) / today[:4] / today[5:7] / f"{today[8:10]}.json"


def summarize_raw_file(
    raw_file: Union[str, Path],
    cases_dir: Union[str, Path],
    summarizer: CaseSummarizer,
    now: Optional[datetime] = None,
) -> Optional[Path]:
    """
    Summarize a day's raw cases into ``cases/YYYY/MM/DD.json``.

    Returns:
        The file written, or None when there is no raw file for the day
    """
    raw_file = Path(raw_file)
    now = now or utc_now()
    try:
        payloads = json.loads(raw_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning(f"No raw cases found at {raw_file}")
        return None
    except ValueError as e:
        raise ParsingError(f"Raw file {raw_file} is not valid JSON: {str(e)}") from e

    logger.info(f"Processing {len(payloads)} raw cases...")
    processed = []
    for payload in payloads:
        try:
            record = CaseRecord.from_dict(payload)
        except ValidationError as e:
            logger.error(f"Failed to process case: {str(e)}")
            continue
        processed.append(summarizer.summarize(record).to_dict())

    output = cases_file_for(cases_dir, now)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(processed, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Saved {len(processed)} processed cases to {output}")
    return output
