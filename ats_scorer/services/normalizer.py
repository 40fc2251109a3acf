"""
Document Normalizer: raw resume / job-description text to the structured section model.

The text-understanding service is tried first when one is configured. Whatever
it returns is validated against ``ExtractedResume`` / ``ExtractedJobDescription``;
a timeout, quota error or schema mismatch drops to the keyword heuristics below.
Callers always get a ``NormalizationResult`` and never an exception.
"""
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ats_scorer.helpers import vocabulary as vocab
from ats_scorer.helpers.parsing import (
    YEAR_RANGE_RE, dedupe, dictionary_skills, extract_experience_years, file_type_of, match_header, split_list
)
from ats_scorer.helpers.prompts import JD_EXTRACT_PROMPT, RESUME_EXTRACT_PROMPT
from ats_scorer.models.models import (
    ExtractedJobDescription, ExtractedResume, FormattingFlags, NormalizationResult,
    ParsedJobDescription, ParsedResume, ResumeMetadata, ResumeSections
)
from ats_scorer.services.llm_client import OllamaClient
from ats_scorer.utils.exceptions import ExternalServiceError, RateLimitError
from ats_scorer.utils.logging_config import get_logger
from ats_scorer.utils.utils import contains_term, split_lines, word_count

logger = get_logger(__name__)

MAX_PROMPT_CHARS = 12000

RESUME_LIST_SECTIONS = ["skills", "experience", "education", "projects", "certifications"]


def analyze_formatting(text: str, has_headers: bool) -> FormattingFlags:
    lines = split_lines(text)
    consistent = len(lines) > 5
    long_enough = word_count(text) > 100
    issues = []
    if not has_headers:
        issues.append("Missing clear section headers")
    if not consistent:
        issues.append("Inconsistent formatting detected")
    if not long_enough:
        issues.append("Resume appears too short")
    return FormattingFlags(
        is_well_formatted=has_headers and consistent,
        is_ats_friendly=has_headers and long_enough,
        format_issues=issues,
    )


def _has_resume_headers(text: str) -> bool:
    return any(match_header(line, vocab.SECTION_HEADERS)[0] for line in split_lines(text))


def _classify_line(line: str) -> Optional[str]:
    """Keyword bucket for a resume line that is not under any header"""
    if any(contains_term(line, t) for t in vocab.DEGREE_TERMS + vocab.INSTITUTION_TERMS):
        return "education"
    if any(contains_term(line, t) for t in vocab.CERTIFICATION_TERMS):
        return "certifications"
    if YEAR_RANGE_RE.search(line) or any(contains_term(line, t) for t in vocab.ROLE_NOUNS) \
            or contains_term(line, "experience"):
        return "experience"
    return None


def heuristic_resume(text: str, file_name: str = "resume.txt") -> ParsedResume:
    """Deterministic line-by-line extraction used when the service is unavailable"""
    buckets: Dict[str, List[str]] = {name: [] for name in RESUME_LIST_SECTIONS}
    summary_lines: List[str] = []
    loose_lines: List[str] = []
    current = None
    saw_header = False

    for line in split_lines(text):
        section, rest = match_header(line, vocab.SECTION_HEADERS)
        if section:
            current, saw_header = section, True
            line = rest
            if not line:
                continue
        if current == "summary":
            summary_lines.append(line)
        elif current == "skills":
            buckets["skills"].extend(split_list(line))
        elif current:
            buckets[current].append(line)
        else:
            bucket = _classify_line(line)
            if bucket:
                buckets[bucket].append(line)
            else:
                loose_lines.append(line)

    if not summary_lines:
        # Prose before the first header usually is the summary; short lines are name/contact
        summary_lines = [line for line in loose_lines if len(line) >= 40][:2]

    buckets["skills"] = dedupe(buckets["skills"] + dictionary_skills(text))
    for name in ("experience", "education", "projects", "certifications"):
        buckets[name] = dedupe(buckets[name])

    return ParsedResume(
        text=text,
        sections=ResumeSections(summary=" ".join(summary_lines), **buckets),
        metadata=ResumeMetadata(
            word_count=word_count(text),
            char_count=len(text),
            file_type=file_type_of(file_name),
            file_name=file_name,
            formatting_flags=analyze_formatting(text, saw_header),
        ),
    )


def _pattern_hits(line: str, patterns) -> List[str]:
    hits = []
    for pattern in patterns:
        for match in pattern.finditer(line):
            captured = (match.group(1) or "").strip(" :-")
            hits.append(captured if len(captured) >= 3 else line.strip())
    return hits


def heuristic_job_description(text: str) -> ParsedJobDescription:
    """Deterministic requirement / skill extraction for job descriptions"""
    blocks = {
        "requirements": vocab.JD_REQUIREMENT_HEADERS,
        "nice": vocab.JD_NICE_TO_HAVE_HEADERS,
        "skills": vocab.JD_SKILL_HEADERS,
    }
    requirements: List[str] = []
    nice_to_have: List[str] = []
    explicit_skills: List[str] = []
    required_lines: List[str] = []
    current = None

    for line in split_lines(text):
        block, rest = match_header(line, blocks)
        if block:
            current = block
            line = rest
            if not line:
                continue

        nice_hits = _pattern_hits(line, vocab.NICE_TO_HAVE_PATTERNS)
        if current == "nice" or nice_hits:
            nice_to_have.extend(nice_hits or [line])
            continue

        required_lines.append(line)
        if current == "skills":
            explicit_skills.extend(split_list(line))
        elif current == "requirements":
            requirements.append(line)
        else:
            requirements.extend(_pattern_hits(line, vocab.HARD_REQUIREMENT_PATTERNS))

    required_text = "\n".join(required_lines)
    return ParsedJobDescription(
        text=text,
        requirements=dedupe(requirements),
        skills_required=dedupe(explicit_skills + dictionary_skills(required_text)),
        nice_to_have=dedupe(nice_to_have),
        experience_years=extract_experience_years(required_text),
    )


class DocumentNormalizer:
    """Turns raw texts into ParsedResume / ParsedJobDescription, service first, heuristics second"""

    def __init__(self, client: Optional[OllamaClient] = None):
        self.client = client

    def _request(self, prompt_template: str, text: str) -> dict:
        if self.client is None:
            raise ExternalServiceError("Text-understanding service is not configured")
        return self.client.extract_json(prompt_template.format(doc=text[:MAX_PROMPT_CHARS]))

    def normalize_resume(
        self, text: str, file_name: str = "resume.txt", extraction: Optional[dict] = None
    ) -> NormalizationResult[ParsedResume]:
        text = text or ""
        reason, rate_limited = None, False
        try:
            raw = extraction if extraction is not None else self._request(RESUME_EXTRACT_PROMPT, text)
            extracted = ExtractedResume.model_validate(raw)
            return NormalizationResult[ParsedResume].ok(self._resume_from_extraction(text, file_name, extracted))
        except RateLimitError as e:
            reason, rate_limited = e.message, True
        except ExternalServiceError as e:
            reason = e.message
        except PydanticValidationError as e:
            reason = f"Extraction response did not match the resume schema ({e.error_count()} errors)"

        logger.info(f"Resume extraction falling back to heuristics: {reason}")
        try:
            return NormalizationResult[ParsedResume].fallback(
                heuristic_resume(text, file_name), reason, rate_limited=rate_limited
            )
        except Exception as e:
            logger.error(f"Heuristic resume extraction failed: {e}", exc_info=True)
            return NormalizationResult[ParsedResume].error(
                f"{reason}; heuristic extraction failed: {e}", rate_limited=rate_limited
            )

    def normalize_job_description(
        self, text: str, extraction: Optional[dict] = None
    ) -> NormalizationResult[ParsedJobDescription]:
        text = text or ""
        reason, rate_limited = None, False
        try:
            raw = extraction if extraction is not None else self._request(JD_EXTRACT_PROMPT, text)
            extracted = ExtractedJobDescription.model_validate(raw)
            return NormalizationResult[ParsedJobDescription].ok(ParsedJobDescription(
                text=text,
                requirements=dedupe(extracted.requirements),
                skills_required=dedupe(extracted.skills_required),
                nice_to_have=dedupe(extracted.nice_to_have),
                experience_years=extracted.experience_years or extract_experience_years(text),
            ))
        except RateLimitError as e:
            reason, rate_limited = e.message, True
        except ExternalServiceError as e:
            reason = e.message
        except PydanticValidationError as e:
            reason = f"Extraction response did not match the job description schema ({e.error_count()} errors)"

        logger.info(f"Job description extraction falling back to heuristics: {reason}")
        try:
            return NormalizationResult[ParsedJobDescription].fallback(
                heuristic_job_description(text), reason, rate_limited=rate_limited
            )
        except Exception as e:
            logger.error(f"Heuristic job description extraction failed: {e}", exc_info=True)
            return NormalizationResult[ParsedJobDescription].error(
                f"{reason}; heuristic extraction failed: {e}", rate_limited=rate_limited
            )

    def _resume_from_extraction(self, text: str, file_name: str, extracted: ExtractedResume) -> ParsedResume:
        sections = extracted.sections
        return ParsedResume(
            text=text,
            sections=ResumeSections(
                summary=sections.summary,
                skills=dedupe(sections.skills + dictionary_skills(text)),
                experience=dedupe(sections.experience),
                education=dedupe(sections.education),
                projects=dedupe(sections.projects),
                certifications=dedupe(sections.certifications),
            ),
            metadata=ResumeMetadata(
                word_count=word_count(text),
                char_count=len(text),
                file_type=file_type_of(file_name),
                file_name=file_name,
                formatting_flags=analyze_formatting(text, _has_resume_headers(text)),
            ),
        )
