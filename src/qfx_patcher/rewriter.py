"""Payee, memo and category rewriting for statement transactions."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .models.core import AccountType, MappingRule, RewriteResult, TransactionRecord
from .utils.error_handler import SchemaError


logger = logging.getLogger(__name__)

INCOME_CATEGORY = "Income"
EXPENSE_CATEGORY = "Misc Expense"


def default_category(transaction_type: str) -> str:
    """Category used when no rule matches"""
    return INCOME_CATEGORY if transaction_type == "CREDIT" else EXPENSE_CATEGORY


def derive_memo(account_type: AccountType, payee: str, memo: Optional[List[str]]) -> str:
    """Build the memo written back to the transaction.

    Checking accounts show the payee, followed by the original memo when
    there is one. Credit card accounts keep the original memo, or a single
    space since the field may not be blank.
    """
    original = memo[0] if memo else ''

    if account_type == AccountType.CHECKING:
        if not original:
            return payee
        return payee + ' ' + original

    return original or ' '


def transaction_record(node: Dict[str, Any]) -> TransactionRecord:
    """Project a STMTTRN node onto the fields the rewriter reads

    Raises:
        SchemaError: If NAME is missing, or NAME or MEMO is not a text leaf
    """
    try:
        payee = node['NAME'][0]
    except (KeyError, IndexError, TypeError):
        raise SchemaError("Transaction has no NAME field") from None
    if not isinstance(payee, str):
        raise SchemaError("Transaction NAME must be a text value")

    memo = node.get('MEMO') or None
    if memo is not None and not isinstance(memo[0], str):
        raise SchemaError(f"Transaction MEMO must be a text value (NAME '{payee}')")

    trntype = node.get('TRNTYPE') or ['']
    return TransactionRecord(
        type=trntype[0],
        raw_payee=payee,
        raw_memo=memo,
    )


def _set_leaf(node: Dict[str, Any], tag: str, value: str, after: str) -> None:
    if tag in node or after not in node:
        node[tag] = [value]
        return

    # A missing field is inserted directly after its anchor
    keys = list(node)
    tail = [(key, node.pop(key)) for key in keys[keys.index(after) + 1:]]
    node[tag] = [value]
    node.update(tail)


class TransactionRewriter:
    """Applies an ordered rule list to statement transactions.

    Rules are tried in list order against the raw payee and against the
    derived memo; the first rule matching either one sets the payee and the
    category. The memo written back is always the derived memo.
    """

    def __init__(self, rules: Sequence[MappingRule]):
        self.rules = tuple(rules)

    def match(self, payee: str, memo: str) -> Optional[MappingRule]:
        """Return the first rule matching the payee or the memo"""
        for rule in self.rules:
            if rule.matches(payee) or rule.matches(memo):
                return rule
        return None

    def compute(self, record: TransactionRecord, account_type: AccountType) -> RewriteResult:
        """Compute replacement values for one transaction"""
        memo = derive_memo(account_type, record.raw_payee, record.raw_memo)
        rule = self.match(record.raw_payee, memo)

        if rule is None:
            return RewriteResult(
                payee=record.raw_payee,
                memo=memo,
                category=default_category(record.type),
            )

        logger.debug(f"'{record.raw_payee}' matched rule '{rule.pattern}' -> {rule.payee}")
        return RewriteResult(payee=rule.payee, memo=memo, category=rule.category, rule=rule)

    def rewrite(self, node: Dict[str, Any], account_type: AccountType) -> RewriteResult:
        """Rewrite NAME and MEMO of a STMTTRN node in place"""
        result = self.compute(transaction_record(node), account_type)
        node['NAME'] = [result.payee]
        _set_leaf(node, 'MEMO', result.memo, after='NAME')
        return result

    def rewrite_all(self, nodes: List[Dict[str, Any]], account_type: AccountType) -> List[RewriteResult]:
        return [self.rewrite(node, account_type) for node in nodes]
