"""Tests for transaction rewriting."""

import pytest

from qfx_patcher.models.core import AccountType, MappingRule, TransactionRecord
from qfx_patcher.rewriter import (
    TransactionRewriter,
    default_category,
    derive_memo,
    transaction_record,
)
from qfx_patcher.utils.error_handler import SchemaError


def _rules(*entries):
    return [MappingRule(pattern=p, payee=payee, category=cat) for p, payee, cat in entries]


class TestDefaults:
    """Test cases for default category and memo derivation"""

    def test_default_category(self):
        assert default_category("CREDIT") == "Income"
        assert default_category("DEBIT") == "Misc Expense"
        assert default_category("CHECK") == "Misc Expense"

    def test_checking_memo(self):
        assert derive_memo(AccountType.CHECKING, "STORE", None) == "STORE"
        assert derive_memo(AccountType.CHECKING, "STORE", ["NOTE"]) == "STORE NOTE"

    def test_credit_card_memo(self):
        assert derive_memo(AccountType.CREDIT_CARD, "STORE", ["NOTE"]) == "NOTE"
        assert derive_memo(AccountType.CREDIT_CARD, "STORE", None) == " "

    def test_empty_memo_treated_as_missing(self):
        assert derive_memo(AccountType.CREDIT_CARD, "STORE", [""]) == " "
        assert derive_memo(AccountType.CHECKING, "STORE", [""]) == "STORE"


class TestTransactionRewriter:
    """Test cases for TransactionRewriter"""

    def setup_method(self):
        self.rewriter = TransactionRewriter(_rules(
            ("A.*", "X", "Cat X"),
            (".*", "Y", "Cat Y"),
        ))

    def test_first_matching_rule_wins(self):
        record = TransactionRecord(type="DEBIT", raw_payee="ABC")
        result = self.rewriter.compute(record, AccountType.CHECKING)

        assert result.payee == "X"
        assert result.category == "Cat X"
        assert result.rule.pattern == "A.*"

    def test_no_match_keeps_payee_and_default_category(self):
        rewriter = TransactionRewriter(_rules(("^AMZN", "Amazon", "Shopping")))

        credit = rewriter.compute(TransactionRecord("CREDIT", "REFUND"), AccountType.CHECKING)
        debit = rewriter.compute(TransactionRecord("DEBIT", "GROCER"), AccountType.CHECKING)

        assert (credit.payee, credit.category, credit.rule) == ("REFUND", "Income", None)
        assert (debit.payee, debit.category, debit.rule) == ("GROCER", "Misc Expense", None)

    def test_memo_only_match_overrides_payee(self):
        rewriter = TransactionRewriter(_rules(("Netflix", "Netflix", "Streaming")))
        record = TransactionRecord("DEBIT", "CARD PURCHASE", ["Netflix.com"])

        result = rewriter.compute(record, AccountType.CREDIT_CARD)

        assert result.payee == "Netflix"
        assert result.category == "Streaming"
        assert result.memo == "Netflix.com"

    def test_search_matches_anywhere(self):
        rewriter = TransactionRewriter(_rules(("PAYROLL", "Acme", "Salary")))
        result = rewriter.compute(TransactionRecord("CREDIT", "ACME CORP PAYROLL"), AccountType.CHECKING)
        assert result.payee == "Acme"

    def test_rewrite_overwrites_name_and_memo(self):
        rewriter = TransactionRewriter(_rules(("AMZN", "Amazon", "Shopping")))
        node = {
            'TRNTYPE': ['DEBIT'],
            'TRNAMT': ['-42.17'],
            'NAME': ['AMZN Mktp US'],
            'MEMO': ['Online purchase'],
        }

        result = rewriter.rewrite(node, AccountType.CHECKING)

        assert node['NAME'] == ['Amazon']
        assert node['MEMO'] == ['AMZN Mktp US Online purchase']
        assert node['TRNAMT'] == ['-42.17']
        assert result.category == "Shopping"

    def test_memo_written_even_without_match(self):
        rewriter = TransactionRewriter([])
        node = {'TRNTYPE': ['CREDIT'], 'NAME': ['PAYMENT'], 'FITID': ['1']}

        result = rewriter.rewrite(node, AccountType.CREDIT_CARD)

        assert node['NAME'] == ['PAYMENT']
        assert node['MEMO'] == [' ']
        assert list(node) == ['TRNTYPE', 'NAME', 'MEMO', 'FITID']
        assert result.category == "Income"

    def test_transaction_record_projection(self):
        record = transaction_record({'TRNTYPE': ['DEBIT'], 'NAME': ['SHOP'], 'MEMO': ['x']})
        assert record == TransactionRecord(type='DEBIT', raw_payee='SHOP', raw_memo=['x'])

    def test_rules_are_shared_read_only(self):
        rules = _rules(("A", "X", "Cat"))
        rewriter = TransactionRewriter(rules)
        rules.append(MappingRule(pattern="B", payee="Y", category="Cat"))

        assert len(rewriter.rules) == 1

    def test_aggregate_name_rejected(self):
        node = {'TRNTYPE': ['DEBIT'], 'NAME': [{'PAYEE': ['SHOP']}]}

        with pytest.raises(SchemaError):
            transaction_record(node)

    def test_aggregate_memo_rejected(self):
        node = {'TRNTYPE': ['DEBIT'], 'NAME': ['SHOP'], 'MEMO': [{'NOTE': ['x']}]}

        with pytest.raises(SchemaError):
            self.rewriter.rewrite(node, AccountType.CHECKING)
