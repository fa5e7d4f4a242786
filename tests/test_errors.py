"""Validation error flattening and error body shapes."""

import unittest

from app.core.errors import (
    AuthorizationError,
    InvariantViolationError,
    RequestValidationFailed,
    flatten_validation_errors,
)


class TestFlattenValidationErrors(unittest.TestCase):
    def test_grouped_by_last_named_location(self):
        details = flatten_validation_errors(
            [
                {"loc": ("body", "email"), "msg": "value is not a valid email address"},
                {"loc": ("body", "commands", 1), "msg": "String should have at least 1 character"},
                {"loc": ("body", "email"), "msg": "second"},
            ]
        )
        self.assertEqual(
            details,
            {
                "email": ["value is not a valid email address", "second"],
                "commands": ["String should have at least 1 character"],
            },
        )

    def test_whole_body_error(self):
        details = flatten_validation_errors([{"loc": ("body",), "msg": "Field required"}])
        self.assertEqual(details, {"body": ["Field required"]})


class TestErrorBodies(unittest.TestCase):
    def test_default_messages(self):
        self.assertEqual(
            AuthorizationError().to_body(),
            {"error": "Forbidden", "message": "Admin access required"},
        )

    def test_invariant_violation_is_bad_request(self):
        err = InvariantViolationError("Cannot delete the last admin")
        self.assertEqual(err.status_code, 400)
        self.assertEqual(err.to_body()["message"], "Cannot delete the last admin")

    def test_validation_body_has_details(self):
        body = RequestValidationFailed({"name": ["too short"]}).to_body()
        self.assertEqual(body, {"error": "Validation failed", "details": {"name": ["too short"]}})


if __name__ == "__main__":
    unittest.main()
