import os

os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from mongomock_motor import AsyncMongoMockClient

from ats_scorer.models.scoring_settings import LLMSettings, ScoringSettings
from ats_scorer.services.scoring import ScoringService

RESUME_TEXT = """Jane Doe
jane.doe@example.com

Summary
Frontend engineer with 5 years of experience building web applications with JavaScript and React.

Skills
JavaScript, React, TypeScript, HTML, CSS, Git

Experience
Senior Frontend Developer, Acme Corp, 2021 - Present
- Led migration of the checkout UI to React, improving conversion by 15%
- Reduced bundle size by 40% through code splitting
Frontend Developer, Beta Ltd, 2019 - 2021
- Built a reusable component library used by 12 engineers

Education
B.Sc. Computer Science, State University
"""

BACKEND_RESUME_TEXT = """John Smith

Summary
Backend developer with 2 years of experience writing Python services and SQL reports.

Skills
Python, Django, PostgreSQL, Docker

Experience
Backend Developer, Gamma Inc, 2022 - 2024
- Maintained internal billing APIs

Education
Bachelor of Arts in History, City College
"""

JD_TEXT = """Frontend Engineer

We are looking for a frontend engineer to build customer-facing web applications.

Requirements:
- 4+ years of experience building web applications
- Strong JavaScript skills

Skills: JavaScript, React

Nice to have:
- GraphQL experience
"""


@pytest.fixture
def settings():
    return ScoringSettings(llm=LLMSettings(enabled=False))


@pytest.fixture
def service(settings):
    return ScoringService(settings, llm_client=None)


@pytest.fixture
def mongo_db():
    return AsyncMongoMockClient()["ats_scorer_test"]
