import logging

from smart_health.services.ai_service import AIServiceError, split_sections

logger = logging.getLogger(__name__)

SUMMARY = "Medical Report Summary"
EXPLANATION = "Detailed Explanation"
SUGGESTIONS = "Health Suggestions"
DISCLAIMER = "Disclaimer"

# Used per section when Gemini answered but left a section out
SECTION_DEFAULTS = {
    "summary": "Medical report analysis completed. Please review with your healthcare provider.",
    "explanation": "This report contains medical data that should be interpreted by qualified healthcare professionals.",
    "suggestions": "Maintain regular health check-ups and follow your doctor's recommendations.",
    "disclaimer": (
        "This AI analysis is for informational purposes only and does not constitute medical advice. "
        "Always consult healthcare professionals for medical decisions."
    ),
}

# Used when the call itself failed
FALLBACK_ANALYSIS = {
    "summary": "Medical report uploaded successfully. AI analysis is temporarily unavailable.",
    "explanation": (
        "Unable to analyze the report content at this time. "
        "Please consult with your healthcare provider for interpretation."
    ),
    "suggestions": "Regular health monitoring and consultation with medical professionals is recommended.",
    "disclaimer": (
        "This is not a medical diagnosis. Please consult qualified healthcare professionals "
        "for interpretation of your medical reports."
    ),
}

_STRUCTURE = f"""
Please provide a structured analysis in the following format:

**{SUMMARY}:**
[Provide a short, easy-to-understand summary of what this type of medical report typically contains]

**{EXPLANATION}:**
[Explain common values/parameters found in such reports, such as:]
- Blood sugar levels and what they mean
- Blood pressure readings and ranges
- Cholesterol levels (HDL, LDL, Total)
- Other common medical markers
- What normal vs abnormal ranges typically indicate
- Possible health risks associated with abnormal values

**{SUGGESTIONS}:**
[Provide general wellness tips and when to consult a doctor]

**{DISCLAIMER}:**
This is not a medical diagnosis. Please consult qualified healthcare professionals for interpretation of your specific medical reports."""


def build_analysis_prompt(file_name: str, mime_type: str | None) -> str:
    mime_type = mime_type or ""
    if mime_type == "application/pdf":
        lead = (
            f'Analyze this medical report PDF named "{file_name}". Since I cannot directly read PDF content, '
            "provide general guidance for interpreting medical reports and suggest what healthcare "
            "professionals typically look for in such documents."
        )
    elif mime_type.startswith("image/"):
        lead = (
            f'Analyze this medical report image named "{file_name}". Since I cannot directly read image content, '
            "provide guidance on what to look for in medical report images and general health insights."
        )
    else:
        lead = f'Analyze this medical report named "{file_name}".'
    return lead + "\n" + _STRUCTURE


def parse_analysis(text: str) -> dict:
    sections = split_sections(text, (SUMMARY, EXPLANATION, SUGGESTIONS, DISCLAIMER))
    return {
        "summary": sections[SUMMARY] or SECTION_DEFAULTS["summary"],
        "explanation": sections[EXPLANATION] or SECTION_DEFAULTS["explanation"],
        "suggestions": sections[SUGGESTIONS] or SECTION_DEFAULTS["suggestions"],
        "disclaimer": sections[DISCLAIMER] or SECTION_DEFAULTS["disclaimer"],
    }


def analyze_report(gemini, file_name: str, mime_type: str | None) -> tuple[dict, str | None]:
    """Returns (structured analysis, raw text). Raw text is None on fallback."""
    prompt = build_analysis_prompt(file_name, mime_type)
    try:
        text = gemini.generate(prompt, temperature=0.3, max_output_tokens=1024)
    except AIServiceError as exc:
        logger.warning("Report analysis failed for %s: %s", file_name, exc)
        return dict(FALLBACK_ANALYSIS), None
    return parse_analysis(text), text
