from __future__ import annotations

from app.ai.types import ChatMessage, EntityKind

RESUME_PARSING_PROMPT = """You are a resume parser for a recruitment pipeline. Extract every field with maximum accuracy.

RULES:
1. Return ONLY a JSON object. No markdown, no commentary.
2. Copy the candidate name exactly as written. Never invent a name or use "Unknown".
3. Collect ALL skills, from the skills section and from experience descriptions.
4. List the complete work history with exact job titles and company names.
5. Use null for missing values, never placeholder text.

JSON SCHEMA:
{
  "name": "string, exactly as written (required)",
  "email": "string | null",
  "phone": "string | null",
  "location": "string | null",
  "title": "string | null, current or most recent job title",
  "summary": "string, 2-3 sentence professional summary",
  "years_of_experience": "number, total years computed from the dates",
  "skills": ["string"],
  "experience": [
    {
      "title": "string",
      "company": "string",
      "location": "string | null",
      "start_date": "YYYY-MM",
      "end_date": "YYYY-MM | 'Present' | null",
      "duration": "string, e.g. '2 years 3 months'",
      "description": "string | null",
      "achievements": ["string"],
      "skills_used": ["string"]
    }
  ],
  "education": [
    {
      "degree": "string",
      "field_of_study": "string | null",
      "institution": "string",
      "location": "string | null",
      "start_year": "YYYY | null",
      "end_year": "YYYY | 'Present' | null",
      "gpa": "string | null",
      "achievements": ["string"]
    }
  ],
  "certifications": [
    {
      "name": "string",
      "issuer": "string",
      "issue_date": "YYYY-MM | null",
      "expiry_date": "YYYY-MM | null",
      "credential_id": "string | null",
      "credential_url": "string | null"
    }
  ],
  "languages": ["string, e.g. 'English (Native)'"]
}

Convert every date to YYYY-MM (e.g. "Jan 2020" becomes "2020-01") and list experience newest first."""

JOB_ANALYSIS_PROMPT = """You are an HR analyst. Extract the structured requirements of this job description.

RULES:
1. Return ONLY a JSON object.
2. Separate must-have requirements from nice-to-have ones.
3. Extract both technical skills (e.g. "Python", "AWS") and domain skills (e.g. "project management").
4. Only list deal breakers that the text states as absolute requirements.

JSON SCHEMA:
{
  "title": "string",
  "required_skills": ["string"],
  "preferred_skills": ["string"],
  "min_experience": "number, minimum years",
  "max_experience": "number | null",
  "education_level": "string | null",
  "location_type": "remote | hybrid | onsite | any",
  "locations": ["string"],
  "seniority_level": "intern | junior | mid | senior | lead | executive",
  "industry": "string | null",
  "key_responsibilities": ["string"],
  "must_have_requirements": ["string"],
  "nice_to_have": ["string"],
  "deal_breakers": ["string"]
}

Seniority guide: intern (0-1 yrs), junior (1-3), mid (3-5), senior (5-8), lead (8+), executive (12+)."""

SKILLS_DEPTH_PROMPT = """Assess whether this resume shows AUTHENTIC technical depth or only superficial knowledge.

RESUME:
{resume_text}

CLAIMED SKILLS:
{skills}

Look for specific versions and tools, concrete metrics and results, technical details that need real
hands-on experience, and project descriptions with real complexity.

Return JSON only:
{{
  "has_specific_details": boolean,
  "has_concrete_metrics": boolean,
  "technical_depth": "superficial" | "moderate" | "deep",
  "suspicious_patterns": ["string"],
  "authenticity_score": 0-100
}}"""

_SYSTEM_PROMPTS: dict[str, str] = {
    "resume": RESUME_PARSING_PROMPT,
    "job": JOB_ANALYSIS_PROMPT,
}


def build_extraction_messages(
    source_text: str,
    kind: EntityKind,
    *,
    max_input_chars: int,
    file_name: str | None = None,
) -> list[ChatMessage]:
    clipped = source_text[:max_input_chars]
    if kind == "resume":
        header = f"Resume File: {file_name}\n" if file_name else ""
        user = f"{header}Resume Text:\n{clipped}"
    else:
        user = f"Job Description:\n\n{clipped}"
    return [
        ChatMessage(role="system", content=_SYSTEM_PROMPTS[kind]),
        ChatMessage(role="user", content=user),
    ]


def build_depth_messages(resume_text: str, skills: list[str]) -> list[ChatMessage]:
    prompt = SKILLS_DEPTH_PROMPT.format(
        resume_text=resume_text[:4000],
        skills=", ".join(skills) if skills else "(none listed)",
    )
    return [ChatMessage(role="user", content=prompt)]
