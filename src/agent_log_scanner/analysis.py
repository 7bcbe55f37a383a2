"""Prompt rendering and response decoding for analysis providers."""

import json
import logging
from typing import Optional

from .core import AnalysisSuggestion, Category, Role, Session, Target
from .errors import AnalysisDecodeError
from .provider import AnalysisProvider

logger = logging.getLogger(__name__)

ANALYSIS_INSTRUCTIONS = f"""\
You review AI coding agent sessions and extract learnings that improve how the agent works next time. You will receive:

1. A transcript of the conversation between a human and the agent
2. A summary of tool usage (tools called, failures)
3. The current CLAUDE.md files (project-level and global)

Identify actionable improvements and return them as discrete, atomic suggestions.

## Focus Areas

### User Preferences
- Communication style (brevity, level of detail, formatting)
- Whether to ask first or act, and which verification steps are expected
- Preferred languages, frameworks and tools

### Workflow Patterns
- Successful patterns and multi-step processes worth documenting
- Approval or confirmation steps the user expects

### Tool Usage
- Tools called with wrong parameters, or the wrong tool for the job
- Repeated calls that could have been batched, redundant reads and searches
- Failed calls caused by predictable issues

### Error Prevention
- Mistakes or assumptions a rule would have prevented
- Edge cases that should be written down

### Knowledge Gaps
- Project-specific context or conventions the agent lacked

### Skills
- Repetitive complex tasks that could become a reusable skill definition

## Output Format

Return ONLY a JSON array of suggestions (no markdown, no explanation):

[
  {{
    "category": "{'|'.join(c.value for c in Category)}",
    "target": "{'|'.join(t.value for t in Target)}",
    "suggestion": "The exact text to add to CLAUDE.md, or the skill definition",
    "reasoning": "Brief explanation of why this helps",
    "evidence": "Quote or reference from the session"
  }}
]

## Guidelines

- Each suggestion is self-contained and atomic
- Write suggestions as instructions or rules, not observations
- Do not repeat rules already present in the CLAUDE.md files
- Return an empty array [] if there is nothing worth suggesting"""


def render_transcript(session: Session) -> str:
    """Render messages as plain text. Tool calls appear by name only."""
    lines = []
    for message in session.messages:
        label = "Human" if message.role is Role.HUMAN else "Assistant"
        text = message.text_content
        if text:
            lines.append(f"[{label}]")
            lines.append(text)
            lines.append("")

        for tool in message.tool_calls:
            lines.append(f"[Tool: {tool.name}]")

    return "\n".join(lines)


def render_tool_summary(session: Session) -> str:
    stats = session.stats
    lines = ["Tool calls by name:"]
    for name, count in sorted(stats.tool_calls_by_name.items(), key=lambda item: item[1], reverse=True):
        lines.append(f"- {name}: {count}")

    if stats.error_count:
        lines.append("")
        lines.append(f"Failed tool calls: {stats.error_count}")

    return "\n".join(lines)


def build_analysis_prompt(
    session: Session,
    global_notes: Optional[str] = None,
    project_notes: Optional[str] = None,
) -> str:
    """Assemble the prompt handed to a provider.

    The instructions and output format come first inside a ``<system>``
    block, followed by the session material. Note contents are passed
    through verbatim.
    """
    sections = [
        "<system>",
        ANALYSIS_INSTRUCTIONS,
        "</system>",
        "",
        "## Session Transcript",
        "",
        render_transcript(session),
        "",
        "## Tool Usage Summary",
        "",
        render_tool_summary(session),
        "",
        "## Current Project CLAUDE.md",
        "",
        project_notes if project_notes is not None else "(No project CLAUDE.md found)",
        "",
        "## Current Global CLAUDE.md",
        "",
        global_notes if global_notes is not None else "(No global CLAUDE.md found)",
        "",
        "---",
        "",
        "Analyze this session and provide suggestions to improve future agent performance.",
    ]
    return "\n".join(sections)


def decode_suggestions(response: str) -> list[AnalysisSuggestion]:
    """Decode the JSON array of suggestions inside a provider response.

    Text around the outermost ``[`` ... ``]`` span is ignored. Elements that
    are not objects or lack a text field are skipped. Raises
    AnalysisDecodeError if no JSON array can be decoded.
    """
    text = response.strip()
    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end > start:
        text = text[start:end + 1]

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise AnalysisDecodeError(f"Failed to parse suggestions: {e}") from e
    if not isinstance(data, list):
        raise AnalysisDecodeError("Failed to parse suggestions: response is not a JSON array")

    suggestions = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning("Skipping suggestion %d: not an object", index)
            continue
        try:
            suggestions.append(AnalysisSuggestion.from_dict(item))
        except ValueError as e:
            logger.warning("Skipping suggestion %d: %s", index, e)
    return suggestions


def analyze_session(
    provider: AnalysisProvider,
    session: Session,
    global_notes: Optional[str] = None,
    project_notes: Optional[str] = None,
) -> list[AnalysisSuggestion]:
    """Run ``provider`` over ``session`` and decode its suggestions."""
    prompt = build_analysis_prompt(session, global_notes=global_notes, project_notes=project_notes)
    logger.info("Analyzing session %s with %s", session.id, provider.name)
    response = provider.complete(prompt)
    return decode_suggestions(response)
