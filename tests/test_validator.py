import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.validation.validator import (  # noqa: E402
    ValidationThresholds,
    create_validation_summary,
    is_valid_email,
    validate,
    validate_job_analysis,
    validate_resume_parse,
)


class ResumeValidationTests(unittest.TestCase):
    RESUME_TEXT = (
        "Jane Doe\n"
        "jane.doe@example.com | +1 555 010 2020 | linkedin.com/in/janedoe\n"
        "Senior Software Engineer\n"
        "Skills: Python, FastAPI, PostgreSQL, Docker\n"
        "Experience\n"
        "Senior Engineer, Acme Corp, 2019-01 to Present\n"
        "Education\n"
        "BSc Computer Science, State University\n"
    )

    def _good_output(self, **overrides):
        output = {
            "name": "Jane Doe",
            "email": "jane.doe@example.com",
            "phone": "+1 555 010 2020",
            "skills": ["Python", "FastAPI", "PostgreSQL", "Docker"],
            "experience": [
                {"title": "Senior Engineer", "company": "Acme Corp", "start_date": "2019-01", "end_date": "Present"}
            ],
            "education": [{"degree": "BSc Computer Science", "institution": "State University"}],
            "years_of_experience": 5,
        }
        output.update(overrides)
        return output

    def test_clean_extraction_scores_full_confidence(self):
        result = validate_resume_parse(self.RESUME_TEXT, self._good_output())
        self.assertTrue(result.valid)
        self.assertEqual(result.confidence, 100)
        self.assertEqual(result.errors, ())

    def test_missing_name_is_critical(self):
        result = validate_resume_parse(self.RESUME_TEXT, self._good_output(name=""))
        self.assertFalse(result.valid)
        self.assertEqual(result.confidence, 60)
        self.assertIn("CRITICAL: No name extracted", result.errors)

    def test_placeholder_name_is_rejected(self):
        result = validate_resume_parse(self.RESUME_TEXT, self._good_output(name="Unknown Candidate"))
        self.assertFalse(result.valid)
        self.assertTrue(any("placeholder" in error for error in result.errors))
        self.assertTrue(any("not found in source" in error for error in result.errors))

    def test_hallucinated_name_fails_even_with_enough_skills(self):
        result = validate_resume_parse(self.RESUME_TEXT, self._good_output(name="John Smith"))
        self.assertFalse(result.valid)
        self.assertEqual(result.confidence, 75)

    def test_too_few_skills_caps_confidence(self):
        result = validate_resume_parse(self.RESUME_TEXT, self._good_output(skills=["Python", "Docker"]))
        self.assertFalse(result.valid)
        self.assertLessEqual(result.confidence, 70)
        self.assertTrue(any("Insufficient skills" in error for error in result.errors))

    def test_unverified_skills_are_penalised(self):
        result = validate_resume_parse(
            self.RESUME_TEXT,
            self._good_output(skills=["Python", "Kubernetes", "Terraform", "Rust"]),
        )
        self.assertEqual(result.confidence, 85)
        self.assertTrue(any("skills verified" in warning for warning in result.warnings))

    def test_minimal_verifiable_extraction_is_valid(self):
        output = {"name": "Jane Doe", "skills": ["Python", "FastAPI", "Docker"]}
        result = validate_resume_parse(self.RESUME_TEXT, output)
        self.assertTrue(result.valid)
        self.assertGreaterEqual(result.confidence, 70)

    def test_invalid_email_and_years_are_errors(self):
        result = validate_resume_parse(
            self.RESUME_TEXT,
            self._good_output(email="not-an-email", years_of_experience=75),
        )
        self.assertFalse(result.valid)
        self.assertEqual(result.confidence, 65)

    def test_malformed_output_shapes_cost_confidence_instead_of_raising(self):
        result = validate_resume_parse(
            self.RESUME_TEXT,
            {"name": 42, "skills": "Python", "experience": "lots", "years_of_experience": "many"},
        )
        self.assertFalse(result.valid)
        self.assertGreaterEqual(result.confidence, 0)

    def test_confidence_never_goes_negative(self):
        result = validate_resume_parse(
            "x" * 10,
            {"name": "", "skills": [], "experience": [], "email": "bad", "years_of_experience": -3},
        )
        self.assertEqual(result.confidence, 0)
        self.assertFalse(result.valid)

    def test_email_pattern(self):
        self.assertTrue(is_valid_email("a.b@c.io"))
        self.assertFalse(is_valid_email("a b@c.io"))
        self.assertFalse(is_valid_email("abc@nodot"))


class JobValidationTests(unittest.TestCase):
    JOB_TEXT = (
        "Senior Backend Engineer (Remote)\n"
        "Requirements: 5+ years of experience with Python, PostgreSQL and AWS.\n"
        "Nice to have: Kubernetes.\n"
        "You will design and operate distributed payment services.\n"
    )

    def _good_output(self, **overrides):
        output = {
            "title": "Senior Backend Engineer",
            "required_skills": ["Python", "PostgreSQL", "AWS"],
            "preferred_skills": ["Kubernetes"],
            "min_experience": 5,
            "max_experience": 10,
            "location_type": "remote",
            "seniority_level": "senior",
        }
        output.update(overrides)
        return output

    def test_clean_job_is_valid(self):
        result = validate_job_analysis(self.JOB_TEXT, self._good_output())
        self.assertTrue(result.valid)
        self.assertEqual(result.confidence, 100)

    def test_missing_title_is_critical(self):
        result = validate_job_analysis(self.JOB_TEXT, self._good_output(title="Unknown Position"))
        self.assertFalse(result.valid)
        self.assertEqual(result.confidence, 60)

    def test_unrealistic_experience_requirement(self):
        result = validate_job_analysis(self.JOB_TEXT, self._good_output(min_experience=40, max_experience=45))
        self.assertFalse(result.valid)
        self.assertEqual(result.confidence, 80)

    def test_missing_minimum_experience_is_a_warning(self):
        result = validate_job_analysis(self.JOB_TEXT, self._good_output(min_experience=None))
        self.assertTrue(result.valid)
        self.assertEqual(result.confidence, 90)

    def test_job_threshold_is_stricter_than_resume(self):
        output = self._good_output(location_type="", seniority_level="", min_experience=None, max_experience=None)
        result = validate(
            "job",
            self.JOB_TEXT,
            output,
            thresholds=ValidationThresholds(resume=70, job=75),
        )
        self.assertEqual(result.confidence, 80)
        self.assertTrue(result.valid)

        strict = validate("job", self.JOB_TEXT, output, thresholds=ValidationThresholds(resume=70, job=85))
        self.assertFalse(strict.valid)

    def test_unknown_kind_is_rejected(self):
        with self.assertRaises(ValueError):
            validate("cover_letter", self.JOB_TEXT, self._good_output())  # type: ignore[arg-type]


class ValidationSummaryTests(unittest.TestCase):
    def test_summary_grades_and_review_flag(self):
        result = validate_resume_parse(ResumeValidationTests.RESUME_TEXT, {"name": "", "skills": []})
        summary = create_validation_summary(result, "resume")
        self.assertEqual(summary.parse_quality, "poor")
        self.assertTrue(summary.requires_review)
        self.assertFalse(summary.ready_for_matching)
        self.assertIn("Poor Quality", summary.user_message)
        self.assertIn("Issues Found:", summary.user_message)


if __name__ == "__main__":
    unittest.main()
