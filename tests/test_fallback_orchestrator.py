import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.ai.errors import QuotaExceededError, SchemaError, TransientProviderError  # noqa: E402
from app.parsing.orchestrator import NEEDS_REVIEW_WARNING, FallbackOrchestrator  # noqa: E402
from app.schemas.parsing import ParseAttempt  # noqa: E402

RESUME_TEXT = (
    "Jane Doe\n"
    "jane.doe@example.com | +1 555 010 2020\n"
    "Skills: Python, FastAPI, PostgreSQL, Docker\n"
    "Senior Engineer, Acme Corp, 2019-01 to Present\n"
    "BSc Computer Science, State University\n"
)

# single-token name (-10) and too few skills (-30): confidence 60, invalid
WEAK_OUTPUT = {"name": "Jane", "skills": ["Python", "Docker"], "experience": [{"title": "Engineer", "company": "Acme Corp", "start_date": "2019-01"}]}
# no experience (-15): confidence 85, valid
GOOD_OUTPUT = {"name": "Jane Doe", "email": "jane.doe@example.com", "skills": ["Python", "FastAPI", "Docker"]}
# single-token name (-10), too few skills (-30), no experience (-15): confidence 45
WORSE_OUTPUT = {"name": "Jane", "skills": ["Python"]}


class FakeExtractor:
    def __init__(self, provider_id, result, cost=0.001):
        self._provider_id = provider_id
        self.result = result
        self.cost = cost
        self.calls = 0
        self.timeouts = []

    @property
    def provider_id(self):
        return self._provider_id

    def extract(self, source_text, kind, *, file_name=None, timeout_s=None):
        self.calls += 1
        self.timeouts.append(timeout_s)
        if isinstance(self.result, Exception):
            raise self.result
        return ParseAttempt(
            provider_id=self._provider_id,
            model=f"{self._provider_id}-model",
            raw_output=self.result,
            cost_estimate=self.cost,
            latency_ms=12,
        )


class FallbackOrchestratorTests(unittest.TestCase):
    def test_accepts_first_valid_provider_without_calling_the_rest(self):
        first = FakeExtractor("primary", GOOD_OUTPUT)
        second = FakeExtractor("secondary", GOOD_OUTPUT)
        outcome = FallbackOrchestrator([first, second], "resume").run(RESUME_TEXT, file_name="jane.pdf")

        self.assertEqual(outcome.status, "accepted")
        self.assertEqual(outcome.provider_id, "primary")
        self.assertEqual(outcome.confidence, 85)
        self.assertEqual(outcome.attempts_made, 1)
        self.assertEqual(second.calls, 0)
        self.assertEqual(outcome.record.name, "Jane Doe")
        self.assertEqual(outcome.record.parse_status, "completed")
        self.assertEqual(outcome.record.parse_confidence, 85)
        self.assertEqual(outcome.record.file_name, "jane.pdf")
        self.assertEqual(outcome.record.parse_method, "primary:primary-model")
        self.assertTrue(outcome.validation_summary.ready_for_matching)

    def test_low_confidence_falls_through_to_next_provider(self):
        first = FakeExtractor("primary", WEAK_OUTPUT)
        second = FakeExtractor("secondary", GOOD_OUTPUT)
        outcome = FallbackOrchestrator([first, second], "resume").run(RESUME_TEXT)

        self.assertEqual(outcome.status, "accepted")
        self.assertEqual(outcome.provider_id, "secondary")
        self.assertEqual(outcome.confidence, 85)
        self.assertEqual(outcome.attempts_made, 2)

    def test_exhaustion_returns_best_attempt_for_review(self):
        first = FakeExtractor("primary", WEAK_OUTPUT)
        second = FakeExtractor("secondary", WORSE_OUTPUT)
        outcome = FallbackOrchestrator([first, second], "resume").run(RESUME_TEXT)

        self.assertEqual(outcome.status, "needs_review")
        self.assertEqual(outcome.provider_id, "primary")
        self.assertEqual(outcome.confidence, 60)
        self.assertEqual(outcome.warning, NEEDS_REVIEW_WARNING)
        self.assertEqual(outcome.record.parse_status, "needs_review")
        self.assertTrue(outcome.validation_summary.requires_review)

    def test_ties_keep_the_earlier_attempt(self):
        first = FakeExtractor("primary", WEAK_OUTPUT)
        second = FakeExtractor("secondary", WEAK_OUTPUT)
        outcome = FallbackOrchestrator([first, second], "resume").run(RESUME_TEXT)
        self.assertEqual(outcome.provider_id, "primary")

    def test_provider_failures_never_abort_the_chain(self):
        chain = [
            FakeExtractor("timeout", TransientProviderError("timed out")),
            FakeExtractor("garbage", SchemaError("not json")),
            FakeExtractor("broke", QuotaExceededError("insufficient_quota")),
            FakeExtractor("crash", KeyError("choices")),
            FakeExtractor("good", GOOD_OUTPUT),
        ]
        with self.assertLogs("app.parsing.orchestrator", level="WARNING"):
            outcome = FallbackOrchestrator(chain, "resume").run(RESUME_TEXT)

        self.assertEqual(outcome.status, "accepted")
        self.assertEqual(outcome.provider_id, "good")
        self.assertEqual(outcome.attempts_made, 5)

    def test_all_providers_failing_reports_guidance(self):
        chain = [
            FakeExtractor("a", TransientProviderError("timed out")),
            FakeExtractor("b", SchemaError("not json")),
        ]
        outcome = FallbackOrchestrator(chain, "resume").run(RESUME_TEXT)

        self.assertEqual(outcome.status, "failed")
        self.assertIsNone(outcome.record)
        self.assertEqual(outcome.attempts_made, 2)
        self.assertIn("All parsing methods failed", outcome.error)

    def test_unusable_record_shape_is_skipped(self):
        chain = [
            FakeExtractor("bad_shape", {"name": "Jane Doe", "skills": ["Python"], "years_of_experience": "lots"}),
            FakeExtractor("good", GOOD_OUTPUT),
        ]
        outcome = FallbackOrchestrator(chain, "resume").run(RESUME_TEXT)
        self.assertEqual(outcome.provider_id, "good")

    def test_short_input_makes_no_provider_calls(self):
        extractor = FakeExtractor("primary", GOOD_OUTPUT)
        outcome = FallbackOrchestrator([extractor], "resume").run("Jane Doe\nPython")

        self.assertEqual(outcome.status, "failed")
        self.assertEqual(outcome.attempts_made, 0)
        self.assertEqual(extractor.calls, 0)
        self.assertIn("too short", outcome.error)

    def test_empty_chain_fails_cleanly(self):
        outcome = FallbackOrchestrator([], "resume").run(RESUME_TEXT)
        self.assertEqual(outcome.status, "failed")
        self.assertEqual(outcome.attempts_made, 0)

    def test_cost_budget_skips_remaining_providers(self):
        first = FakeExtractor("expensive", WEAK_OUTPUT, cost=0.06)
        second = FakeExtractor("secondary", GOOD_OUTPUT)
        outcome = FallbackOrchestrator([first, second], "resume", max_cost_per_parse=0.05).run(RESUME_TEXT)

        self.assertEqual(second.calls, 0)
        self.assertEqual(outcome.status, "needs_review")
        self.assertEqual(outcome.provider_id, "expensive")

    def test_deadline_is_passed_down_and_enforced(self):
        ticks = iter([0.0, 1.0, 31.0])
        first = FakeExtractor("primary", WEAK_OUTPUT)
        second = FakeExtractor("secondary", GOOD_OUTPUT)
        orchestrator = FallbackOrchestrator([first, second], "resume", clock=lambda: next(ticks))
        outcome = orchestrator.run(RESUME_TEXT, deadline_s=30)

        self.assertEqual(first.timeouts, [29.0])
        self.assertEqual(second.calls, 0)
        self.assertEqual(outcome.status, "needs_review")

    def test_job_outcome_carries_a_job_profile(self):
        job_text = (
            "Senior Backend Engineer (Remote)\n"
            "Requirements: 5+ years of experience with Python, PostgreSQL and AWS.\n"
            "You will design and operate distributed payment services for merchants.\n"
        )
        extractor = FakeExtractor(
            "primary",
            {
                "title": "Senior Backend Engineer",
                "required_skills": ["Python", "PostgreSQL", "AWS"],
                "min_experience": 5,
                "location_type": "Remote",
                "seniority_level": "senior",
            },
        )
        outcome = FallbackOrchestrator([extractor], "job").run(job_text)

        self.assertEqual(outcome.status, "accepted")
        self.assertEqual(outcome.record.title, "Senior Backend Engineer")
        self.assertEqual(outcome.record.location_type, "remote")
        self.assertEqual(outcome.record.max_experience, 10)


if __name__ == "__main__":
    unittest.main()
