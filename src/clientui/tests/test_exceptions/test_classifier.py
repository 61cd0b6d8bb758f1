import json

import pytest

from clientui.exceptions import ClassifiableFailure, classify, classify_failure
from clientui.exceptions.classifier import (
    CONFLICT_DEFAULT_MESSAGE,
    NOTES_EMPTY_MESSAGE,
    PATIENT_NOT_FOUND_MESSAGE,
    SERVICE_UNAVAILABLE_MESSAGE,
)
from clientui.models.errors import ErrorKind, FieldError

OP = "patients.get"


class TestServerErrors:

    @pytest.mark.parametrize("status", [500, 502, 503, 599])
    @pytest.mark.parametrize("body", [None, "", "Patient not found", '{"error": "Patient already exists"}',
                                      '[{"field":"lastname","defaultMessage":"x"}]'])
    def test_5xx_is_service_unavailable_whatever_the_body(self, status, body):
        """
        Behavior:
            - Any status >= 500 classifies as SERVICE_UNAVAILABLE, even when the body looks
              like a 404, 409 or 400 body.

        Importance:
            - The orchestrator only fails fast on SERVICE_UNAVAILABLE; a misleading body must
              never turn an infrastructure failure into something it tries to repair.
        """
        error = classify(status, body, OP)

        assert error.kind is ErrorKind.SERVICE_UNAVAILABLE
        assert error.http_status == status

    def test_503_uses_fixed_unavailable_message(self):
        assert classify(503, "stack trace here", OP).message == SERVICE_UNAVAILABLE_MESSAGE

    def test_other_5xx_message_names_status(self):
        error = classify(502, "Bad gateway", OP)

        assert "502" in error.message
        assert "Bad gateway" not in error.message


class TestNotFound:

    def test_patient_not_found_text(self):
        error = classify(404, "Patient not found", OP)

        assert error.kind is ErrorKind.ENTITY_NOT_FOUND
        assert error.message == "The requested patient does not exist."
        assert error.message == PATIENT_NOT_FOUND_MESSAGE

    def test_notes_empty_text(self):
        error = classify(404, "Notes are empty", "notes.list")

        assert error.kind is ErrorKind.DEPENDENT_COLLECTION_EMPTY
        assert error.message == NOTES_EMPTY_MESSAGE

    def test_sniffing_is_case_insensitive(self):
        assert classify(404, "PATIENT NOT FOUND", OP).kind is ErrorKind.ENTITY_NOT_FOUND
        assert classify(404, "the list is EMPTY", OP).kind is ErrorKind.DEPENDENT_COLLECTION_EMPTY

    def test_generic_not_found_mentions_operation(self):
        error = classify(404, "Something else", OP)

        assert error.kind is ErrorKind.ENTITY_NOT_FOUND
        assert OP in error.message
        assert error.message != PATIENT_NOT_FOUND_MESSAGE

    def test_missing_body_is_generic_not_found(self):
        error = classify(404, None, "risk.get")

        assert error.kind is ErrorKind.ENTITY_NOT_FOUND
        assert "risk.get" in error.message
        assert error.raw_body is None

    def test_body_mentioning_notes_and_patient(self):
        """
        The backends never defined what a 404 mentioning both words means. The notes check
        runs first, this test pins that order so a change is deliberate.
        """
        error = classify(404, "No notes found for patient 7", "notes.list")

        assert error.kind is ErrorKind.DEPENDENT_COLLECTION_EMPTY

    @pytest.mark.parametrize(
        "code, kind",
        [
            ("notes_empty", ErrorKind.DEPENDENT_COLLECTION_EMPTY),
            ("patient_not_found", ErrorKind.ENTITY_NOT_FOUND),
            ("not_found", ErrorKind.ENTITY_NOT_FOUND),
        ],
    )
    def test_structured_code_wins_over_text(self, code, kind):
        # the text would sniff as the opposite kind
        text = "patient" if kind is ErrorKind.DEPENDENT_COLLECTION_EMPTY else "notes empty"
        error = classify(404, json.dumps({"code": code, "error": text}), OP)

        assert error.kind is kind

    def test_unknown_structured_code_falls_back_to_text(self):
        error = classify(404, json.dumps({"code": "gone", "error": "Patient not found"}), OP)

        assert error.kind is ErrorKind.ENTITY_NOT_FOUND
        assert error.message == PATIENT_NOT_FOUND_MESSAGE


class TestValidation:

    def test_field_errors_are_parsed(self):
        body = '[{"field":"lastname","defaultMessage":"Lastname cannot be empty"}]'

        error = classify(400, body, "patients.update")

        assert error.kind is ErrorKind.VALIDATION_FAILED
        assert error.field_errors == (FieldError("lastname", "Lastname cannot be empty"),)
        assert error.is_parsed
        assert error.errors_by_field() == {"lastname": "Lastname cannot be empty"}

    def test_several_fields_keep_order_and_ignore_unknown_keys(self):
        body = json.dumps([
            {"field": "lastname", "defaultMessage": "required", "code": "NotBlank"},
            {"field": "dateofbirth", "defaultMessage": "must be a past date"},
        ])

        error = classify(400, body, "patients.create")

        assert [fe.field for fe in error.field_errors] == ["lastname", "dateofbirth"]
        assert "lastname" in error.message and "dateofbirth" in error.message

    @pytest.mark.parametrize("body", ["Bad request", '{"field": "lastname"}', '[{"field": "lastname"}]', None])
    def test_unparsable_body_keeps_raw_text(self, body):
        error = classify(400, body, "patients.update")

        assert error.kind is ErrorKind.VALIDATION_FAILED
        assert error.field_errors == ()
        assert not error.is_parsed
        assert error.parse_error
        if body is not None:
            assert body in error.message


class TestConflict:

    def test_error_message_is_extracted(self):
        error = classify(409, '{"error":"Patient already exists"}', "patients.create")

        assert error.kind is ErrorKind.CONFLICT
        assert error.message == "Patient already exists"
        assert error.is_parsed

    def test_missing_error_key_uses_default(self):
        error = classify(409, '{"detail":"duplicate"}', "patients.create")

        assert error.message == CONFLICT_DEFAULT_MESSAGE
        assert error.is_parsed

    @pytest.mark.parametrize("body", ["not json", "[1, 2]", None])
    def test_unparsable_body_uses_default_and_records_why(self, body):
        error = classify(409, body, "patients.create")

        assert error.kind is ErrorKind.CONFLICT
        assert error.message == "Conflict detected."
        assert not error.is_parsed


class TestUnclassified:

    @pytest.mark.parametrize("status", [401, 403, 418, 302])
    def test_other_statuses_carry_status_and_body(self, status):
        error = classify(status, "nope", OP)

        assert error.kind is ErrorKind.UNCLASSIFIED
        assert error.http_status == status
        assert error.message == "nope"
        assert error.raw_body == "nope"

    def test_without_body_message_names_status(self):
        assert "401" in classify(401, None, OP).message


class TestClassifyContract:

    @pytest.mark.parametrize(
        "status, body",
        [
            (404, "Patient not found"),
            (400, '[{"field":"lastname","defaultMessage":"Lastname cannot be empty"}]'),
            (400, "garbage"),
            (409, "not json"),
            (503, None),
            (418, "teapot"),
        ],
    )
    def test_classify_is_idempotent(self, status, body):
        assert classify(status, body, OP) == classify(status, body, OP)

    @pytest.mark.parametrize("body", ["\x00\xff", "{" * 500, "[" * 5000, "null", "42"])
    @pytest.mark.parametrize("status", [400, 404, 409])
    def test_classify_never_raises(self, status, body):
        error = classify(status, body, OP)

        assert error.source_operation == OP

    def test_classify_failure_reads_the_failure(self):
        failure = ClassifiableFailure(409, '{"error":"Patient already exists"}', "patients.create")

        error = classify_failure(failure)

        assert error.kind is ErrorKind.CONFLICT
        assert error.source_operation == "patients.create"

    def test_payload_leaves_out_raw_body(self):
        payload = classify(404, "Patient 42 Smith not found", OP).to_payload()

        assert "Smith" not in json.dumps(payload)
        assert payload["kind"] == "entity_not_found"
        assert payload["expected_status"] == 404
