import pytest

from monitorism.core.errors import InvalidSignature
from monitorism.signatures.canonical import canonicalize_signature, parse_signature, tokenize


@pytest.mark.parametrize(
    "signature",
    [
        "transfer(address,uint256)",
        "Transfer(address,address,uint256)",
        "ping()",
        "swap((address,uint256)[],bytes32)",
    ],
)
def test_canonical_input_is_unchanged(signature: str) -> None:
    assert canonicalize_signature(signature) == signature
    assert canonicalize_signature(canonicalize_signature(signature)) == signature


def test_parameter_names_are_stripped() -> None:
    assert canonicalize_signature("transfer(address owner, uint256 amount)") == "transfer(address,uint256)"


def test_indexed_keyword_is_dropped() -> None:
    sig = "Transfer(address indexed from, address indexed to, uint256 value)"
    assert canonicalize_signature(sig) == "Transfer(address,address,uint256)"


def test_data_location_and_payable_are_dropped() -> None:
    sig = "execTransaction(address payable to, bytes memory data, string calldata note)"
    assert canonicalize_signature(sig) == "execTransaction(address,bytes,string)"


def test_whitespace_everywhere() -> None:
    assert canonicalize_signature("  f ( uint8  a ,\tbool\n b )  ") == "f(uint8,bool)"


@pytest.mark.parametrize("signature", ["ping()", "ping( )", "ping(\t)"])
def test_empty_parameter_list(signature: str) -> None:
    assert canonicalize_signature(signature) == "ping()"


def test_nested_tuples_and_arrays() -> None:
    sig = "submit(tuple(address target, (uint8 v, bytes32 r)[] sigs) call, uint256[ 2 ] [] grid)"
    assert canonicalize_signature(sig) == "submit((address,(uint8,bytes32)[]),uint256[2][])"


def test_parse_signature_exposes_name_and_types() -> None:
    parsed = parse_signature("AddedOwner(address owner)")
    assert parsed.name == "AddedOwner"
    assert parsed.types == ("address",)
    assert parsed.canonical == "AddedOwner(address)"


@pytest.mark.parametrize(
    "signature",
    [
        "",
        "   ",
        "transfer",
        "transfer(address",
        "transfer address,uint256)",
        "(address,uint256)",
        "transfer(address,)",
        "transfer(,address)",
        "transfer(address,,uint256)",
        "transfer(address, ,uint256)",
        "transfer(address a b)",
        "transfer(address)extra",
        "transfer(address)(uint256)",
        "transfer((address,uint256)",
        "transfer(address;uint256)",
        "transfer([]address)",
    ],
)
def test_malformed_signatures_are_rejected(signature: str) -> None:
    with pytest.raises(InvalidSignature):
        canonicalize_signature(signature)


def test_invalid_signature_is_a_value_error() -> None:
    with pytest.raises(ValueError) as excinfo:
        canonicalize_signature("transfer(address,)")
    assert excinfo.value.signature == "transfer(address,)"
    assert "empty parameter" in excinfo.value.reason


def test_tokenize_normalizes_array_suffix() -> None:
    tokens = tokenize("f(uint[ 3 ] x)")
    assert [t.value for t in tokens] == ["f", "(", "uint", "[3]", "x", ")"]
