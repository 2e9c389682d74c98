import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import app.main  # noqa: F401,E402
from app.ai.adapter import ExtractionAdapter  # noqa: E402
from app.ai.config import ProviderSpec  # noqa: E402
from app.ai.errors import TransientProviderError  # noqa: E402
from app.ai.types import Completion, Usage  # noqa: E402
from app.authenticity.analyzer import AuthenticityAnalyzer, AuthenticityConfig  # noqa: E402
from app.matching.engine import rank_candidates  # noqa: E402
from app.parsing.orchestrator import FallbackOrchestrator  # noqa: E402


class QueueClient:
    def __init__(self, *responses):
        self.responses = list(responses)

    def complete(self, messages, *, temperature, max_tokens, timeout_s, json_mode=True):
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return Completion(text=json.dumps(response), model="queued", usage=Usage(800, 400))


def _spec(provider_id):
    return ProviderSpec(
        provider_id=provider_id,
        vendor="openai",
        model="queued",
        input_cost_per_1k=0.01,
        output_cost_per_1k=0.03,
        retry_backoff_s=0,
    )


RESUME_TEXT = (
    "Jane Doe\n"
    "jane.doe@example.com | +1 555 010 2020 | linkedin.com/in/janedoe\n"
    "Skills: Python, React, AWS, PostgreSQL\n"
    "Senior Engineer, Acme Corp, 2019-01 to Present. Cut checkout latency by 40%.\n"
    "BSc Computer Science, State University\n"
)
JOB_TEXT = (
    "Full Stack Engineer\n"
    "Requirements: 3+ years of experience with Python, React and AWS.\n"
    "Nice to have: GraphQL. Hybrid role in Berlin building merchant dashboards.\n"
)


class PipelineSmokeTests(unittest.TestCase):
    def test_parse_match_and_check_authenticity(self):
        resume_primary = QueueClient(TransientProviderError("timed out"), {"name": "Jane", "skills": ["Python"]})
        resume_secondary = QueueClient(
            {
                "name": "Jane Doe",
                "email": "jane.doe@example.com",
                "phone": "+1 555 010 2020",
                "skills": ["Python", "React", "AWS", "PostgreSQL"],
                "experience": [
                    {"title": "Senior Engineer", "company": "Acme Corp", "start_date": "2019-01", "end_date": "Present"}
                ],
                "education": [{"degree": "BSc Computer Science", "institution": "State University"}],
                "years_of_experience": 5,
            }
        )
        resume_orchestrator = FallbackOrchestrator(
            [
                ExtractionAdapter(resume_primary, _spec("primary")),
                ExtractionAdapter(resume_secondary, _spec("secondary")),
            ],
            "resume",
        )
        resume = resume_orchestrator.run(RESUME_TEXT, file_name="jane.txt")
        self.assertEqual(resume.status, "accepted")
        self.assertEqual(resume.provider_id, "secondary")
        self.assertEqual(resume.attempts_made, 2)

        job_client = QueueClient(
            {
                "title": "Full Stack Engineer",
                "required_skills": ["Python", "React", "AWS"],
                "preferred_skills": ["GraphQL"],
                "min_experience": 3,
                "location_type": "hybrid",
                "seniority_level": "mid",
            }
        )
        job = FallbackOrchestrator([ExtractionAdapter(job_client, _spec("job"))], "job").run(JOB_TEXT)
        self.assertEqual(job.status, "accepted")

        ranked = rank_candidates([resume.record], job.record)
        self.assertEqual(ranked[0].overall_score, 100)
        self.assertEqual(ranked[0].tier, "A")

        report = AuthenticityAnalyzer(config=AuthenticityConfig()).analyze(RESUME_TEXT, resume.record, JOB_TEXT)
        self.assertGreaterEqual(report.overall_score, 0)
        self.assertLessEqual(report.overall_score, 100)
        self.assertTrue(report.recommendations)


if __name__ == "__main__":
    unittest.main()
