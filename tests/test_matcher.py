from monitorism.rules.index import RuleIndex
from monitorism.rules.matcher import EventMatcher

from .factories import APPROVAL_TOPIC, OTHER, TOKEN, TRANSFER, TRANSFER_TOPIC, make_log, make_rules, rule


def _matcher(*rules: dict) -> EventMatcher:
    return EventMatcher(RuleIndex(make_rules(*rules)))


def test_unscoped_rule_matches_any_address() -> None:
    matcher = _matcher(rule("R1", TRANSFER))
    for address in (TOKEN, OTHER):
        (result,) = matcher.match(make_log(TRANSFER_TOPIC, address))
        assert result.rule.name == "R1"
        assert result.log.address == address.lower()


def test_scoped_rule_rejects_other_addresses() -> None:
    matcher = _matcher(rule("R1", TRANSFER, addresses=[TOKEN]))
    assert matcher.match(make_log(TRANSFER_TOPIC, OTHER)) == []
    assert len(matcher.match(make_log(TRANSFER_TOPIC, TOKEN))) == 1


def test_address_comparison_ignores_case() -> None:
    matcher = _matcher(rule("R1", TRANSFER, addresses=[TOKEN.lower()]))
    log = make_log(TRANSFER_TOPIC, TOKEN)
    assert len(matcher.match(log)) == 1


def test_anonymous_logs_never_match() -> None:
    matcher = _matcher(rule("R1", TRANSFER), rule("R2", "Approval(address,address,uint256)"))
    assert matcher.match(make_log(None)) == []


def test_unknown_topic_does_not_match() -> None:
    matcher = _matcher(rule("R1", TRANSFER))
    assert matcher.match(make_log(APPROVAL_TOPIC)) == []


def test_shared_topic_yields_one_result_per_rule() -> None:
    matcher = _matcher(rule("R1", TRANSFER), rule("R2", TRANSFER, priority="P0"))
    results = matcher.match(make_log(TRANSFER_TOPIC))
    assert [(r.rule.name, r.rule.priority) for r in results] == [("R1", "P1"), ("R2", "P0")]


def test_matched_event_is_recorded_for_multi_event_rules() -> None:
    matcher = _matcher(rule("multi", TRANSFER, "Approval(address owner, address spender, uint256 value)"))
    (result,) = matcher.match(make_log(APPROVAL_TOPIC))
    assert result.event.canonical == "Approval(address,address,uint256)"
    assert result.rule.first_event.signature == TRANSFER


def test_match_all_flattens_in_log_order() -> None:
    matcher = _matcher(rule("R1", TRANSFER, addresses=[TOKEN]))
    logs = [
        make_log(TRANSFER_TOPIC, TOKEN, tx_hash="0x01"),
        make_log(TRANSFER_TOPIC, OTHER, tx_hash="0x02"),
        make_log(None),
        make_log(TRANSFER_TOPIC, TOKEN, tx_hash="0x03"),
    ]
    assert [r.log.tx_hash for r in matcher.match_all(logs)] == ["0x01", "0x03"]
