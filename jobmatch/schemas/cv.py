from pydantic import BaseModel, Field, model_validator


class AnalysisResponse(BaseModel):
    """Body returned by the external ``/analyze-cv`` endpoint."""

    parsed_text: str = Field(alias="parsedText")
    extracted_skills: list[str] = Field(alias="extractedSkills")

    @model_validator(mode="after")
    def require_content(self):
        # An empty answer is unusable; the caller falls back to local extraction
        if not self.parsed_text.strip():
            raise ValueError("parsedText is empty")
        if not [skill for skill in self.extracted_skills if skill.strip()]:
            raise ValueError("extractedSkills is empty")
        return self


class CvParseResult(BaseModel):
    parsed_text: str
    extracted_skills: list[str]
    source: str
