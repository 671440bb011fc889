"""Tests for text normalization and vocabulary skill extraction (no DB needed)."""

from jobmatch.services.skills import SKILL_VOCABULARY, extract_skills
from jobmatch.services.text import contains_phrase, normalize, normalize_terms

SAMPLES = [
    "Experienced with Kubernetes and Docker",
    "Senior Python developer, Machine Learning and NLP, AWS + GCP",
    "Frontend: React, HTML, CSS. Backend: Node.js / Express. CI/CD with GitHub Actions",
    "Strong communication, leadership and problem solving skills",
    "",
]


def test_normalize_lowercases():
    assert normalize("React AND Node") == "react and node"


def test_normalize_empty_and_none():
    assert normalize("") == ""
    assert normalize(None) == ""


def test_normalize_terms_deduplicates_case_insensitively():
    assert normalize_terms(["React", "react ", "SQL", "", "  "]) == {"react", "sql"}


def test_extract_kubernetes_and_docker():
    assert extract_skills("Experienced with Kubernetes and Docker") == {"kubernetes", "docker"}


def test_extract_empty_text():
    assert extract_skills("") == set()
    assert extract_skills(None) == set()


def test_extract_is_subset_of_vocabulary_and_idempotent():
    vocabulary = set(SKILL_VOCABULARY)
    for text in SAMPLES:
        skills = extract_skills(text)
        assert skills <= vocabulary
        assert skills == extract_skills(normalize(text))


def test_extract_does_not_depend_on_vocabulary_order():
    text = SAMPLES[1]
    assert extract_skills(text, tuple(reversed(SKILL_VOCABULARY))) == extract_skills(text)


def test_multi_word_skills_need_the_contiguous_phrase():
    assert "machine learning" in extract_skills("Machine Learning engineer")
    assert "machine learning" not in extract_skills("learning to fix every machine")


def test_short_terms_do_not_match_inside_words():
    skills = extract_skills("Google Sheets and JavaScript")
    assert "go" not in skills
    assert "java" not in skills
    assert "javascript" in skills


def test_symbols_in_terms():
    skills = extract_skills("Fluent in C++, C# and CI/CD; Node.js on the back end")
    assert {"c++", "c#", "ci/cd", "node"} <= skills


def test_contains_phrase():
    assert contains_phrase("built with node.js", "Node")
    assert not contains_phrase("reactive streams", "react")
    assert not contains_phrase("", "react")
    assert not contains_phrase("react", "")
