import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.ai.adapter import ExtractionAdapter, ensure_min_length  # noqa: E402
from app.ai.config import ProviderSpec  # noqa: E402
from app.ai.errors import InputTooShortError, QuotaExceededError, SchemaError, TransientProviderError  # noqa: E402
from app.ai.output import extract_json_block  # noqa: E402
from app.ai.types import Completion, Usage  # noqa: E402


class ScriptedClient:
    """Returns or raises the scripted responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def complete(self, messages, *, temperature, max_tokens, timeout_s, json_mode=True):
        self.calls.append({"messages": list(messages), "timeout_s": timeout_s, "temperature": temperature})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


RESUME_TEXT = (
    "Jane Doe\n"
    "jane.doe@example.com\n"
    "Skills: Python, FastAPI, PostgreSQL, Docker\n"
    "Senior Engineer at Acme Corp since 2019\n"
)
RESUME_JSON = json.dumps({"name": "Jane Doe", "skills": ["Python", "FastAPI", "Docker"]})


def _spec(**overrides):
    values = {
        "provider_id": "fake_primary",
        "vendor": "openai",
        "model": "fake-model",
        "input_cost_per_1k": 0.01,
        "output_cost_per_1k": 0.03,
        "retry_backoff_s": 0,
    }
    values.update(overrides)
    return ProviderSpec(**values)


def _completion(text=RESUME_JSON, input_tokens=1000, output_tokens=500):
    return Completion(text=text, model="fake-model", usage=Usage(input_tokens=input_tokens, output_tokens=output_tokens))


class ExtractionAdapterTests(unittest.TestCase):
    def test_short_input_never_calls_the_provider(self):
        client = ScriptedClient(_completion())
        adapter = ExtractionAdapter(client, _spec())
        with self.assertRaises(InputTooShortError) as ctx:
            adapter.extract("Jane Doe, Python", "resume")
        self.assertEqual(client.calls, [])
        self.assertIn("minimum 50 characters", str(ctx.exception))

    def test_whitespace_padding_does_not_count_towards_length(self):
        with self.assertRaises(InputTooShortError):
            ensure_min_length("   short text   " + " " * 200, "resume", 50)

    def test_job_minimum_is_longer_than_resume_minimum(self):
        text = "Python engineer wanted. " * 3
        ensure_min_length(text, "resume", 50)
        with self.assertRaises(InputTooShortError) as ctx:
            ensure_min_length(text, "job", 100)
        self.assertIn("Job description text too short", str(ctx.exception))

    def test_successful_extraction_reports_usage_and_cost(self):
        client = ScriptedClient(_completion())
        attempt = ExtractionAdapter(client, _spec()).extract(RESUME_TEXT, "resume")
        self.assertEqual(attempt.provider_id, "fake_primary")
        self.assertEqual(attempt.raw_output["name"], "Jane Doe")
        self.assertEqual(attempt.token_usage.total_tokens, 1500)
        self.assertAlmostEqual(attempt.cost_estimate, 0.025)
        self.assertEqual(len(client.calls), 1)
        self.assertEqual(client.calls[0]["messages"][0].role, "system")

    def test_fenced_json_is_accepted(self):
        client = ScriptedClient(_completion(text=f"Here you go:\n```json\n{RESUME_JSON}\n```"))
        attempt = ExtractionAdapter(client, _spec()).extract(RESUME_TEXT, "resume")
        self.assertEqual(attempt.raw_output["skills"], ["Python", "FastAPI", "Docker"])

    def test_transient_errors_are_retried_at_most_twice(self):
        client = ScriptedClient(
            TransientProviderError("timeout"),
            TransientProviderError("timeout"),
            TransientProviderError("timeout"),
            _completion(),
        )
        with self.assertRaises(TransientProviderError):
            ExtractionAdapter(client, _spec(max_retries=5)).extract(RESUME_TEXT, "resume")
        self.assertEqual(len(client.calls), 3)

    def test_transient_error_then_success(self):
        client = ScriptedClient(TransientProviderError("rate limited"), _completion())
        attempt = ExtractionAdapter(client, _spec()).extract(RESUME_TEXT, "resume")
        self.assertEqual(len(client.calls), 2)
        self.assertEqual(attempt.raw_output["name"], "Jane Doe")

    def test_schema_errors_are_not_retried(self):
        client = ScriptedClient(_completion(text="I could not find a resume."), _completion())
        with self.assertRaises(SchemaError):
            ExtractionAdapter(client, _spec()).extract(RESUME_TEXT, "resume")
        self.assertEqual(len(client.calls), 1)

    def test_quota_errors_are_not_retried(self):
        client = ScriptedClient(QuotaExceededError("insufficient_quota"), _completion())
        with self.assertRaises(QuotaExceededError):
            ExtractionAdapter(client, _spec()).extract(RESUME_TEXT, "resume")
        self.assertEqual(len(client.calls), 1)

    def test_timeout_is_capped_by_the_remaining_deadline(self):
        client = ScriptedClient(_completion())
        ExtractionAdapter(client, _spec(timeout_s=120)).extract(RESUME_TEXT, "resume", timeout_s=4.5)
        self.assertEqual(client.calls[0]["timeout_s"], 4.5)

    def test_spec_clamps_timeout_and_retries(self):
        spec = _spec(timeout_s=120, max_retries=9)
        self.assertEqual(spec.timeout_s, 30.0)
        self.assertEqual(spec.max_retries, 2)

    def test_long_input_is_truncated_in_the_prompt(self):
        client = ScriptedClient(_completion())
        long_text = RESUME_TEXT + ("filler line about projects\n" * 2000)
        ExtractionAdapter(client, _spec(), max_input_chars={"resume": 500}).extract(long_text, "resume")
        user_message = client.calls[0]["messages"][-1].content
        self.assertNotIn(long_text, user_message)
        self.assertIn("Jane Doe", user_message)


class JsonExtractionTests(unittest.TestCase):
    def test_plain_object(self):
        self.assertEqual(extract_json_block('{"a": 1}'), {"a": 1})

    def test_object_embedded_in_prose(self):
        self.assertEqual(extract_json_block('Result: {"a": {"b": 2}} thanks'), {"a": {"b": 2}})

    def test_non_object_is_rejected(self):
        self.assertIsNone(extract_json_block("[1, 2, 3]"))
        self.assertIsNone(extract_json_block(""))


if __name__ == "__main__":
    unittest.main()
