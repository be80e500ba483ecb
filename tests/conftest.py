import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from resume_analyzer.services.analysis_store import AnalysisStore
from resume_analyzer.services.document_extractor import DocumentTextExtractor
from resume_analyzer.services.llm_service import LLMClient
from resume_analyzer.services.llm_stages import ResumeExtractor, ResumeMatchAnalyzer
from resume_analyzer.services.pipeline import ResumeAnalysisPipeline
from resume_analyzer.services.retry import RetryPolicy

SAMPLE_RESUME = """Jane Doe
jane.doe@example.com | (555) 123-4567
Austin, TX

EXPERIENCE
Acme Corp
Software Engineer
2019 - 2021
Built data pipelines in Python

EDUCATION
State University
B.S. 2018 Computer Science

SKILLS
Technical: Python, Go
Leadership, Communication
"""

EXTRACTED_PROFILE = {
    "contactInfo": {
        "name": "Jane Doe",
        "email": "jane.doe@example.com",
        "phone": "(555) 123-4567",
        "location": "Austin, TX",
    },
    "education": [
        {
            "institution": "State University",
            "degree": "B.S.",
            "field": "Computer Science",
            "year": "2018",
        }
    ],
    "experience": [
        {
            "company": "Acme Corp",
            "title": "Software Engineer",
            "startDate": "2019-01",
            "endDate": "2021-06",
            "description": "Built data pipelines in Python",
        }
    ],
    "skills": {
        "technical": ["Python", "Go"],
        "soft": ["Leadership", "Communication"],
        "industry": [],
    },
}

ANALYSIS_REPLY = {
    "educationLevel": "Bachelor's in Computer Science",
    "yearsExperience": "2.5 years as a software engineer",
    "skillsMatch": "High - strong Python background",
    "keySkills": {"technical": ["Python"], "soft": ["Communication"], "industry": []},
    "missingRequirements": {"technical": ["Kubernetes"], "soft": [], "industry": []},
    "overallScore": 82,
    "analysis": {
        "strengths": ["Python"],
        "gaps": ["No Kubernetes"],
        "recommendations": ["Interview"],
    },
}

JOB_DESCRIPTION = "Backend engineer with Python and Kubernetes experience."


# --- Supabase double ---
class FakeResult:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    def __init__(self, client: "FakeSupabaseClient", table: str):
        self.client = client
        self.table_name = table
        self.action = "select"
        self.filters: List[tuple] = []
        self.payload: Optional[Dict[str, Any]] = None
        self.on_conflict: Optional[str] = None
        self.row_limit: Optional[int] = None

    def select(self, *columns):
        self.action = "select"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def delete(self):
        self.action = "delete"
        return self

    def insert(self, row):
        self.action = "insert"
        self.payload = row
        return self

    def upsert(self, row, on_conflict=""):
        self.action = "upsert"
        self.payload = row
        self.on_conflict = on_conflict
        return self

    def execute(self):
        return self.client.execute(self)


class FakeSupabaseClient:
    """In-memory stand-in for the PostgREST query builder the store uses."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.operations: List[str] = []
        self.failing_actions = set()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, table: str = "application_analyses") -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def execute(self, query: FakeQuery) -> FakeResult:
        self.operations.append(query.action)
        if query.action in self.failing_actions:
            raise RuntimeError(f"{query.action} failed")

        rows = self.rows(query.table_name)
        matching = [
            row for row in rows if all(row.get(col) == val for col, val in query.filters)
        ]
        if query.action == "select":
            selected = [dict(row) for row in matching]
            if query.row_limit is not None:
                selected = selected[: query.row_limit]
            return FakeResult(selected)
        if query.action == "delete":
            for row in matching:
                rows.remove(row)
            return FakeResult(matching)
        if query.action == "insert":
            key = query.payload["application_id"]
            if any(row["application_id"] == key for row in rows):
                raise RuntimeError("duplicate key value violates unique constraint")
            rows.append(dict(query.payload))
            return FakeResult([query.payload])
        if query.action == "upsert":
            key = query.on_conflict
            for index, row in enumerate(rows):
                if row.get(key) == query.payload.get(key):
                    rows[index] = dict(query.payload)
                    break
            else:
                rows.append(dict(query.payload))
            return FakeResult([query.payload])
        raise AssertionError(f"unexpected action {query.action}")


def stored_row(application_id: int, **overrides) -> Dict[str, Any]:
    row = {
        "application_id": application_id,
        "job_id": 7,
        "education_level": "Master's in Physics",
        "years_experience": "6 years",
        "skills_match": "High",
        "key_skills": ["Python", "Go"],
        "missing_requirements": [],
        "overall_score": 88,
        "fallback": False,
        "analyzed_at": "2024-01-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


# --- Language model double ---
def chat_response(content: str, status_code: int = 200, headers=None) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"role": "assistant", "content": content}}]},
        headers=headers,
    )


class FakeLLM:
    """
    Answers chat completion requests from two queues, picked by prompt kind.
    Each queue item is an httpx.Response, a dict (sent as JSON content) or a str.
    """

    def __init__(self, extraction=None, analysis=None):
        self.extraction = list(extraction or [])
        self.analysis = list(analysis or [])
        self.requests: List[Dict[str, Any]] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        prompt = payload["messages"][0]["content"]
        queue = self.extraction if "resume parser" in prompt else self.analysis
        if not queue:
            return httpx.Response(500, text="no reply queued")
        reply = queue.pop(0)
        if isinstance(reply, httpx.Response):
            return reply
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        return chat_response(reply)


def build_transport(llm: FakeLLM, documents: Optional[Dict[str, httpx.Response]] = None):
    documents = documents or {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/chat/completions"):
            return llm(request)
        url = str(request.url)
        if url in documents:
            return documents[url]
        return httpx.Response(404, text="not found")

    return httpx.MockTransport(handler)


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def supabase():
    return FakeSupabaseClient()


@pytest.fixture
def store(supabase):
    return AnalysisStore(supabase)


@pytest.fixture
def sleeps():
    return RecordingSleep()


@pytest.fixture
def make_pipeline(store, sleeps):
    def factory(
        llm: FakeLLM, documents=None, api_key="test-key", **options
    ) -> ResumeAnalysisPipeline:
        http_client = httpx.AsyncClient(transport=build_transport(llm, documents))
        client = LLMClient(http_client, api_key=api_key, base_url="https://llm.test/v1")
        policy = RetryPolicy(sleep=sleeps)
        return ResumeAnalysisPipeline(
            store=store,
            documents=DocumentTextExtractor(http_client),
            extractor=ResumeExtractor(client, policy),
            analyzer=ResumeMatchAnalyzer(client, policy),
            **options,
        )

    return factory
