"""Unit tests for the custom exception hierarchy."""

import pytest

from src.evaluator.exceptions import (
    ConfigurationError,
    ConflictError,
    CriteriaNotFoundError,
    EvaluatorNotFoundError,
    InputValidationError,
    MemberNotFoundError,
    NotFoundError,
    PersistenceError,
    SessionError,
    SlotUnavailableError,
    TargetNotFoundError,
    http_status_for,
)


class TestSessionErrorHierarchy:
    """All custom exceptions inherit from SessionError."""

    @pytest.mark.parametrize("exc_class", [
        InputValidationError,
        NotFoundError,
        TargetNotFoundError,
        EvaluatorNotFoundError,
        MemberNotFoundError,
        CriteriaNotFoundError,
        ConflictError,
        SlotUnavailableError,
        PersistenceError,
        ConfigurationError,
    ])
    def test_subclass_of_session_error(self, exc_class: type):
        assert issubclass(exc_class, SessionError)

    @pytest.mark.parametrize("exc_class", [
        TargetNotFoundError,
        EvaluatorNotFoundError,
        MemberNotFoundError,
        CriteriaNotFoundError,
    ])
    def test_lookup_misses_are_not_found(self, exc_class: type):
        assert issubclass(exc_class, NotFoundError)

    def test_slot_unavailable_is_conflict(self):
        assert issubclass(SlotUnavailableError, ConflictError)


class TestSessionErrorContext:
    def test_default_context_is_empty_dict(self):
        err = SessionError("boom")
        assert err.context == {}

    def test_custom_context_stored(self):
        ctx = {"targetKey": "m9"}
        err = TargetNotFoundError("Target member not found", context=ctx)
        assert err.context == ctx
        assert str(err) == "Target member not found"

    def test_raise_and_catch_as_session_error(self):
        with pytest.raises(SessionError):
            raise EvaluatorNotFoundError("nope")


class TestPayload:
    def test_payload_has_code_and_message(self):
        err = EvaluatorNotFoundError("Evaluator not found")
        assert err.to_payload() == {"error": "evaluator_not_found", "message": "Evaluator not found"}

    def test_codes_are_distinct(self):
        classes = [
            SessionError, InputValidationError, NotFoundError, TargetNotFoundError,
            EvaluatorNotFoundError, MemberNotFoundError, CriteriaNotFoundError,
            ConflictError, SlotUnavailableError, PersistenceError, ConfigurationError,
        ]
        assert len({c.code for c in classes}) == len(classes)


class TestHttpStatus:
    @pytest.mark.parametrize("exc,status", [
        (InputValidationError("x"), 400),
        (TargetNotFoundError("x"), 404),
        (CriteriaNotFoundError("x"), 404),
        (SlotUnavailableError("x"), 409),
        (PersistenceError("x"), 500),
        (ConfigurationError("x"), 500),
        (SessionError("x"), 500),
    ])
    def test_status_mapping(self, exc, status):
        assert http_status_for(exc) == status
