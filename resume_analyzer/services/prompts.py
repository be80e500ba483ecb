import json

from resume_analyzer.models.resume import ExtractedResumeData


def build_extraction_prompt(resume_text: str) -> str:
    return f"""
You are a precise resume parser. Extract the candidate's details from the resume below.

[Resume Text]
{resume_text}

Rules:
- Preserve the original wording of names, institutions, companies, titles and skills.
- Convert every date to YYYY-MM (use YYYY when no month is given, "Present" for ongoing roles).
- Never invent information. Use "" for unknown strings and [] for unknown lists.
- Put each skill in exactly one of: technical, soft, industry.

Strictly, respond ONLY with one JSON object in this format:

{{
  "contactInfo": {{"name": "", "email": "", "phone": "", "location": ""}},
  "education": [
    {{"institution": "", "degree": "", "field": "", "year": "", "gpa": ""}}
  ],
  "experience": [
    {{"company": "", "title": "", "startDate": "", "endDate": "", "description": ""}}
  ],
  "skills": {{"technical": [], "soft": [], "industry": []}}
}}
"""


def build_analysis_prompt(profile: ExtractedResumeData, job_description: str) -> str:
    profile_json = json.dumps(profile.model_dump(by_alias=True), indent=2)
    return f"""
You're an AI recruitment assistant analyzing a candidate against a job description.

[Job Description]
{job_description}

[Candidate Profile JSON]
{profile_json}

Instructions:
- educationLevel: summarize all of the candidate's education, highest level first.
- yearsExperience: total relevant experience computed from the dates, with a short explanation.
- skillsMatch: "High", "Medium" or "Low" followed by a one-sentence rationale.
- keySkills: skills from the profile that match the job, grouped by category (technical, soft, industry).
- missingRequirements: job requirements the profile does not show, grouped the same way.
- overallScore: an integer from 0 to 100 for the overall match.
- analysis: short lists of strengths, gaps and recommendations.

Strictly, respond ONLY with one JSON object in this format, without code blocks or explanations:

{{
  "educationLevel": "",
  "yearsExperience": "",
  "skillsMatch": "Medium - ...",
  "keySkills": {{"technical": [], "soft": [], "industry": []}},
  "missingRequirements": {{"technical": [], "soft": [], "industry": []}},
  "overallScore": 0,
  "analysis": {{"strengths": [], "gaps": [], "recommendations": []}}
}}
"""
