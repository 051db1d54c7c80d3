"""
Ledger ids: the contract takes uint256 story/chapter ids, the store uses UUID strings.
The ledger id is the first 8 hex digits of the UUID (dashes removed), read as an integer.
"""
import string

LEDGER_ID_HEX_DIGITS = 8
_HEX = frozenset(string.hexdigits)


class InvalidLedgerId(ValueError):
    pass


def to_ledger_id(identifier: str) -> int:
    """'0000000a-...' -> 10. Raises InvalidLedgerId for ids that are not hex."""
    digits = str(identifier).replace("-", "")[:LEDGER_ID_HEX_DIGITS]
    if not digits or not set(digits) <= _HEX:
        raise InvalidLedgerId(f"Identifier {identifier!r} has no numeric ledger form")
    return int(digits, 16)
