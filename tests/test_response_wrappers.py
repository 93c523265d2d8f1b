"""Tests for automation-backend response normalization."""

import pytest

from src.integrations.contracts.generation import Approved, DecisionDetails, Rejected
from src.integrations.errors import UpstreamContractViolation
from src.integrations.policy.response_wrappers import (
    as_object,
    detect_approval,
    extract_creation_id,
    extract_decision_details,
    first_present,
    normalize_checkout_response,
    parse_approval,
    pick_nested_string,
    pick_string,
    sanitize_url,
)


# ---------------------------------------------------------------------------
# sanitize_url
# ---------------------------------------------------------------------------

def test_sanitize_url_strips_equals_and_repairs_single_slash():
    assert sanitize_url("=https:/checkout.stripe.com/pay/123") == "https://checkout.stripe.com/pay/123"


def test_sanitize_url_unwraps_checkout_path():
    assert sanitize_url("https://example.com/checkout/=https://real.target/x") == "https://real.target/x"


def test_sanitize_url_unwraps_before_repairing_slashes():
    assert sanitize_url("==https://app.example.com/checkout/=https:/checkout.stripe.com/c/pay/cs_1") == (
        "https://checkout.stripe.com/c/pay/cs_1"
    )


def test_sanitize_url_repairs_http_single_slash():
    assert sanitize_url("http:/localhost:8080/pay") == "http://localhost:8080/pay"


def test_sanitize_url_prefixes_bare_provider_host():
    assert sanitize_url("checkout.stripe.com/c/pay/cs_test_9") == "https://checkout.stripe.com/c/pay/cs_test_9"


def test_sanitize_url_keeps_valid_url_untouched():
    url = "https://checkout.stripe.com/c/pay/cs_live_a1#fragment"
    assert sanitize_url(url) == url


@pytest.mark.parametrize(
    "raw",
    [None, 42, {"url": "https://x.y"}, "", "   ", "not a url", "/relative/path", "ftp://files.example.com/a", "https://", "=", "example.com/pay"],
)
def test_sanitize_url_rejects_unrecoverable_input(raw):
    assert sanitize_url(raw) is None


@pytest.mark.parametrize(
    "raw",
    [
        "=https:/checkout.stripe.com/pay/123",
        "https://example.com/checkout/=https://real.target/x",
        "https://a.example/checkout/=https://b.example/checkout/=https:/c.example/z",
        "checkout.stripe.com/c/pay/1",
        "  https://checkout.stripe.com/c/pay/2  ",
        "HTTPS:/Checkout.Stripe.com/x",
    ],
)
def test_sanitize_url_is_idempotent(raw):
    once = sanitize_url(raw)
    assert once is not None
    assert sanitize_url(once) == once


# ---------------------------------------------------------------------------
# shape helpers
# ---------------------------------------------------------------------------

def test_as_object_accepts_dict_and_single_element_list():
    obj = {"url": "https://a.b"}
    assert as_object(obj) is obj
    assert as_object([obj]) is obj


@pytest.mark.parametrize("value", [None, "text", 3, [], [{"a": 1}, {"b": 2}], ["x"]])
def test_as_object_rejects_other_shapes(value):
    assert as_object(value) is None


def test_pick_string_respects_priority_and_skips_blank_values():
    obj = {"url": "  ", "checkout_url": "https://second", "checkoutUrl": "https://third"}
    assert pick_string(obj, ["url", "checkout_url", "checkoutUrl"]) == "https://second"


def test_pick_string_ignores_non_strings():
    assert pick_string({"url": 12, "URL": "https://ok"}, ["url", "URL"]) == "https://ok"
    assert pick_string(None, ["url"]) is None


def test_pick_nested_string_reads_container():
    obj = {"metadados": {"purchase_id": "p-9"}}
    assert pick_nested_string(obj, "metadados", ["purchase_id"]) == "p-9"
    assert pick_nested_string(obj, "metadata", ["purchase_id"]) is None


def test_first_present_returns_first_defined_non_empty():
    assert first_present([lambda: None, lambda: "", lambda: 0, lambda: "x"]) == 0
    assert first_present([]) is None


# ---------------------------------------------------------------------------
# normalize_checkout_response
# ---------------------------------------------------------------------------

def test_normalize_checkout_plain_object():
    result = normalize_checkout_response(
        {"url": "https://checkout.stripe.com/c/pay/cs_1", "purchase_id": "p-1", "session_id": "cs_1"}
    )
    assert result.url == "https://checkout.stripe.com/c/pay/cs_1"
    assert result.purchase_id == "p-1"
    assert result.session_id == "cs_1"


def test_normalize_checkout_array_with_nested_metadata():
    result = normalize_checkout_response(
        [{"checkoutUrl": "=https:/checkout.stripe.com/c/pay/cs_2", "id": "cs_2", "metadata": {"purchaseId": "p-2"}}]
    )
    assert result.url == "https://checkout.stripe.com/c/pay/cs_2"
    assert result.session_id == "cs_2"
    assert result.purchase_id == "p-2"


def test_normalize_checkout_output_wrapper():
    result = normalize_checkout_response({"output": {"URL": "https://checkout.stripe.com/c/pay/cs_3", "metadados": {"purchase_id": "p-3"}}})
    assert result.url == "https://checkout.stripe.com/c/pay/cs_3"
    assert result.purchase_id == "p-3"


def test_normalize_checkout_falls_back_to_plain_text():
    result = normalize_checkout_response(None, "=https:/checkout.stripe.com/c/pay/cs_4")
    assert result.url == "https://checkout.stripe.com/c/pay/cs_4"
    assert result.purchase_id is None
    assert result.session_id is None


def test_normalize_checkout_without_url_raises_with_upstream_error():
    with pytest.raises(UpstreamContractViolation) as excinfo:
        normalize_checkout_response({"error": "Stripe key invalid"}, '{"error": "Stripe key invalid"}')
    assert str(excinfo.value) == "Stripe key invalid"


def test_normalize_checkout_never_returns_relative_url():
    with pytest.raises(UpstreamContractViolation):
        normalize_checkout_response({"url": "/checkout/success"}, '{"url": "/checkout/success"}')


# ---------------------------------------------------------------------------
# approval parsing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "value",
    [None, "aprovado", 12, [], {}, {"foo": "bar"}, {"status": "pending"}, {"approved": None}, [{"a": 1}, {"b": 2}], {"output": "text"}],
)
def test_parse_approval_fails_open_without_signal(value):
    assert detect_approval(value) is None
    assert parse_approval(value) == Approved()


@pytest.mark.parametrize("status", ["reprovado", "REPROVADO", "Reprovada", "rejected", "REJECT", "Content Rejected"])
def test_rejection_status_any_casing(status):
    verdict = parse_approval({"status": status})
    assert isinstance(verdict, Rejected)
    assert verdict.reason


def test_rejection_reason_priority():
    verdict = parse_approval({"status": "reprovado", "reason": "second", "motivo": "first"})
    assert verdict == Rejected(reason="first")


def test_rejection_reason_defaults_when_missing_or_blank():
    assert parse_approval({"status": "reprovado"}) == Rejected(reason="Não aprovado")
    assert parse_approval({"status": "reprovado", "motivo": "   "}) == Rejected(reason="Não aprovado")


def test_status_approved():
    assert parse_approval({"status": "Aprovado"}) == Approved()
    assert parse_approval({"status": "approved"}) == Approved()


def test_output_wrapper_is_unwrapped_first():
    verdict = parse_approval({"status": "aprovado", "output": {"status": "reprovado", "motivo": "conteúdo ofensivo"}})
    assert verdict == Rejected(reason="conteúdo ofensivo")


def test_output_without_signal_falls_back_to_outer_object():
    assert parse_approval({"output": {"note": "x"}, "approved": False, "error": "nope"}) == Rejected(reason="nope")


def test_single_element_array_is_accepted():
    assert parse_approval([{"status": "reprovado", "motivo": "spam"}]) == Rejected(reason="spam")


@pytest.mark.parametrize(
    "value, expected",
    [
        ({"approved": True}, Approved()),
        ({"aprovado": "sim"}, Approved()),
        ({"isApproved": 1}, Approved()),
        ({"is_approved": "true"}, Approved()),
        ({"approval": False, "reason": "violates policy"}, Rejected(reason="violates policy")),
        ({"approved": "false", "message": "blocked"}, Rejected(reason="blocked")),
        ({"aprovado": 0}, Rejected(reason="Não aprovado")),
    ],
)
def test_boolean_like_flags(value, expected):
    assert parse_approval(value) == expected


def test_unrecognized_status_falls_through_to_flag():
    assert parse_approval({"status": "done", "approved": False, "motivo": "x"}) == Rejected(reason="x")


# ---------------------------------------------------------------------------
# decision details / creation id
# ---------------------------------------------------------------------------

def test_decision_details_prefers_output():
    details = extract_decision_details({"status": "outer", "output": {"status": "reprovado", "risco": 0.92, "codigo_motivo": "HATE"}})
    assert details == DecisionDetails(status="reprovado", reason_code="HATE", risk_score=0.92)


def test_decision_details_best_effort():
    assert extract_decision_details("plain text") == DecisionDetails()
    details = extract_decision_details({"status": 3, "risk_score": "0,4", "reason_code": True})
    assert details.status is None
    assert details.risk_score == pytest.approx(0.4)
    assert details.reason_code is None


def test_decision_details_ignores_boolean_risk():
    assert extract_decision_details({"risco": True}).risk_score is None


def test_extract_creation_id():
    assert extract_creation_id({"creation_id": "c-1"}) == "c-1"
    assert extract_creation_id({"output": {"creationId": 77}}) == "77"
    assert extract_creation_id({"status": "aprovado"}) is None
    assert extract_creation_id(None) is None


@pytest.mark.parametrize("status", ["Não aprovado", "nao aprovado", "REJEITADO", "rejeitada", "not approved", "Unapproved"])
def test_negated_or_portuguese_rejection_status(status):
    assert isinstance(parse_approval({"status": status}), Rejected)
