RESUME_EXTRACT_PROMPT = """You are an information extractor for resumes.
Analyze the resume below and return strict JSON with this structure:

{{
  "sections": {{
    "summary": "brief professional summary if found",
    "skills": ["skill1", "skill2"],
    "experience": ["role, company, dates, key achievements", "..."],
    "education": ["degree, institution, year", "..."],
    "projects": ["project with short description", "..."],
    "certifications": ["certification", "..."]
  }}
}}

- Skills: technical skills, programming languages, tools, frameworks.
- Keep each experience entry on one line and keep its date range (e.g. 2019-2023).
- If a section is missing, use an empty list.
- Do not invent information that is not in the resume.

RESUME:
{doc}

Return only the JSON object, no additional text.
"""

JD_EXTRACT_PROMPT = """You are an information extractor for job descriptions.
Analyze the job description below and return strict JSON with this structure:

{{
  "requirements": ["must-have requirement", "..."],
  "skillsRequired": ["skill1", "skill2"],
  "niceToHave": ["preferred qualification", "..."],
  "experienceYears": 3
}}

- requirements: hard, mandatory qualifications only.
- skillsRequired: short technical skill and tool names.
- experienceYears: minimum years of experience as an integer, or null.
- Do not invent information that is not in the job description.

JOB DESCRIPTION:
{doc}

Return only the JSON object, no additional text.
"""
