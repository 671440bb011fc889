"""Heuristic skill extraction against a fixed vocabulary."""

from jobmatch.services.text import contains_phrase, normalize

SKILL_VOCABULARY = (
    # languages
    "javascript", "typescript", "python", "java", "c#", "c++", "php", "ruby",
    "go", "rust", "swift", "r", "sql", "html", "css", "sass", "less",
    # frameworks and libraries
    "react", "node", "express", "tailwind", "bootstrap", "material-ui",
    "jest", "mocha", "cypress", "selenium",
    # data stores
    "mongodb",
    # cloud and tooling
    "aws", "azure", "gcp", "docker", "kubernetes", "jenkins", "git", "github",
    "gitlab", "bitbucket", "jira", "devops", "ci/cd",
    # process
    "agile", "scrum", "kanban", "testing", "qa", "product management",
    "project management",
    # design
    "ui/ux", "figma", "sketch", "adobe", "photoshop", "illustrator", "xd",
    "indesign",
    # marketing
    "marketing", "seo", "sem", "content", "social media",
    # data
    "analytics", "data science", "machine learning", "ai", "nlp",
    "computer vision", "data analysis", "statistics", "tableau", "power bi",
    # office
    "excel", "word", "powerpoint",
    # soft skills
    "communication", "leadership", "teamwork", "problem solving",
    "critical thinking",
)


def extract_skills(text: str | None, vocabulary=SKILL_VOCABULARY) -> set[str]:
    """Return the vocabulary terms whose phrase occurs in ``text``."""
    normalized = normalize(text)
    if not normalized:
        return set()
    return {normalize(term) for term in vocabulary if contains_phrase(normalized, term)}
