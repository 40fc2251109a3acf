"""
Score-run report rendering. The route only needs ``render``, ``media_type`` and
``extension``; a PDF renderer can be swapped in on ``app.state.report_renderer``.
"""
from typing import List

from ats_scorer.models.response import ScoreRunDetail

SECTION_ORDER = ["skills", "experience", "education", "keywords"]


class ReportRenderer:
    media_type = "application/octet-stream"
    extension = "bin"

    def render(self, run: ScoreRunDetail) -> bytes:
        raise NotImplementedError

    def filename(self, run: ScoreRunDetail) -> str:
        return f"score-run-{run.id}.{self.extension}"


class MarkdownReportRenderer(ReportRenderer):
    media_type = "text/markdown; charset=utf-8"
    extension = "md"

    def render(self, run: ScoreRunDetail) -> bytes:
        title = run.job_description.title if run.job_description else "Job Description"
        md_lines: List[str] = [f"# ATS Score Report: {title}"]
        if run.resume:
            md_lines.append(f"**Resume**: {run.resume.title}")
        md_lines.append(f"**Created**: {run.created_at.isoformat()} (model {run.model_version})\n")
        md_lines.append(f"## Overall score: {run.overall}/100\n")

        md_lines += ["| Section | Score |", "|---|---:|"]
        for name in SECTION_ORDER:
            if name in run.sections:
                md_lines.append(f"| {name.capitalize()} | {run.sections[name]} |")

        gates = run.gaps.get("gates", [])
        if gates:
            md_lines += ["\n## Hard requirements", "| Requirement | Status | Details |", "|---|---|---|"]
            for g in gates:
                status = "Passed" if g.get("passed") else "Failed"
                md_lines.append(f"| {g.get('rule', '')} | {status} | {g.get('details', '')} |")

        missing = run.gaps.get("missingKeywords", [])
        md_lines.append("\n## Missing keywords")
        if missing:
            md_lines += [f"- {kw}" for kw in missing]
        else:
            md_lines.append("> No missing keywords.")

        actions = run.suggestions.get("topActions", [])
        bullets = run.suggestions.get("bullets", [])
        if actions or bullets:
            md_lines.append("\n## Suggestions")
            md_lines += [f"- {a}" for a in actions]
            if bullets:
                md_lines.append("\nExample bullets:")
                md_lines += [f"- {b}" for b in bullets]

        return "\n".join(md_lines).encode("utf-8")
