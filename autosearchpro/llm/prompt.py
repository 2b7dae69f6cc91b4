"""
autosearchpro/llm/prompt.py

Builds the keyword-extraction prompt for a job description.

Output contract the model is held to:
- a JSON array only, no prose
- each element: {"keyword": str, "frequency": int >= 1, "category": "skill" | "requirement"}
- at most MAX_KEYWORDS elements
"""
from __future__ import annotations

MAX_KEYWORDS = 25
# Long descriptions are truncated to keep the request small.
MAX_DESCRIPTION_CHARS = 8000

_SYSTEM_PROMPT = """\
You extract search keywords from job descriptions for building Boolean job-board queries.
Return ONLY a JSON array. Each element is an object with exactly these fields:
"keyword" (a short term or phrase as it appears in the text),
"frequency" (how many times it is mentioned or implied, integer >= 1),
"category" ("skill" for tools, technologies and competencies; "requirement" for qualifications such as degrees, \
years of experience, certifications, clearances or work authorisation).
Do not include company boilerplate, benefits, or generic words like "team" or "experience".\
"""


def build_extraction_prompt(description: str) -> str:
    text = (description or "").strip()
    if len(text) > MAX_DESCRIPTION_CHARS:
        text = text[:MAX_DESCRIPTION_CHARS] + "…"

    return f"""\
Extract up to {MAX_KEYWORDS} keywords from the job description below, most important first.

JOB DESCRIPTION:
{text}

Respond with the JSON array only.\
"""
