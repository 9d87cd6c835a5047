"""Tests for the individual risk heuristics."""

import asyncio

import pytest

from approval_risk.core import (
    MAX_UINT256,
    RULES,
    ApprovalEvent,
    OracleError,
    RiskReason,
    SpenderFacts,
    evaluate_rules,
    gather_spender_facts,
)
from approval_risk.core.rules import eoa_spender, fresh_contract_spender, no_prior_interaction, unlimited_approval

from helpers import EMPTY_CODE, OWNER, SPENDER, TOKEN, TX_HASH, FakeOracle


def make_event(value: int = 10**18, spender: str = SPENDER, tx_to=SPENDER) -> ApprovalEvent:
    return ApprovalEvent(
        owner=OWNER,
        spender=spender,
        value=value,
        token_contract=TOKEN,
        tx_hash=TX_HASH,
        tx_from=OWNER,
        tx_to=tx_to,
        block_number=1,
        log_index=0,
    )


ESTABLISHED_CONTRACT = SpenderFacts(is_contract=True, transaction_count=10)


def test_rule_order_is_fixed():
    assert RULES == (unlimited_approval, eoa_spender, fresh_contract_spender, no_prior_interaction)


@pytest.mark.parametrize("value", [0, 1, 10**18, 2**64, MAX_UINT256 - 1])
def test_unlimited_approval_needs_exact_sentinel(value):
    assert unlimited_approval(make_event(value=value), ESTABLISHED_CONTRACT) is None


def test_unlimited_approval_triggers_on_max_uint256():
    assert unlimited_approval(make_event(value=MAX_UINT256), ESTABLISHED_CONTRACT) is RiskReason.UNLIMITED_APPROVAL


def test_approval_value_must_fit_uint256():
    with pytest.raises(ValueError):
        make_event(value=MAX_UINT256 + 1)


@pytest.mark.parametrize("count", [0, 1, 100])
def test_eoa_rule_never_triggers_for_contracts(count):
    facts = SpenderFacts(is_contract=True, transaction_count=count)
    assert eoa_spender(make_event(), facts) is None


def test_eoa_rule_triggers_for_accounts_without_code():
    facts = SpenderFacts(is_contract=False, transaction_count=3)
    assert eoa_spender(make_event(), facts) is RiskReason.EOA_SPENDER


def test_fresh_contract_rule():
    assert fresh_contract_spender(make_event(), SpenderFacts(True, 0)) is RiskReason.FRESH_CONTRACT_SPENDER
    assert fresh_contract_spender(make_event(), SpenderFacts(True, 1)) is None
    # EOAs with no history are covered by the EOA rule only
    assert fresh_contract_spender(make_event(), SpenderFacts(False, 0)) is None


def test_no_prior_interaction_compares_case_insensitively():
    event = make_event(spender=SPENDER, tx_to="0xDEF0000000000000000000000000000000000000")
    assert no_prior_interaction(event, ESTABLISHED_CONTRACT) is None


def test_no_prior_interaction_triggers_for_other_target():
    event = make_event(tx_to="0x9999999999999999999999999999999999999999")
    assert no_prior_interaction(event, ESTABLISHED_CONTRACT) is RiskReason.NO_PRIOR_INTERACTION


def test_no_prior_interaction_triggers_for_contract_creation():
    assert no_prior_interaction(make_event(tx_to=None), ESTABLISHED_CONTRACT) is RiskReason.NO_PRIOR_INTERACTION


def test_evaluate_rules_accumulates_in_order():
    event = make_event(value=MAX_UINT256, tx_to=None)
    facts = SpenderFacts(is_contract=False, transaction_count=0)

    assert evaluate_rules(event, facts) == [
        RiskReason.UNLIMITED_APPROVAL,
        RiskReason.EOA_SPENDER,
        RiskReason.NO_PRIOR_INTERACTION,
    ]


def test_evaluate_rules_clean_approval():
    assert evaluate_rules(make_event(), ESTABLISHED_CONTRACT) == []


def test_gather_spender_facts_queries_both_lookups():
    oracle = FakeOracle(code={SPENDER: EMPTY_CODE}, tx_counts={SPENDER: 4})

    facts = asyncio.run(gather_spender_facts(oracle, SPENDER))

    assert facts == SpenderFacts(is_contract=False, transaction_count=4)
    assert sorted(method for method, _ in oracle.calls) == ["get_code", "get_transaction_count"]


def test_gather_spender_facts_propagates_oracle_failure():
    oracle = FakeOracle(errors={SPENDER: TimeoutError("slow node")})
    with pytest.raises(OracleError):
        asyncio.run(gather_spender_facts(oracle, SPENDER))
