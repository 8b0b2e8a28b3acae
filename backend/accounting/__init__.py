# accounting/__init__.py
"""
Accounting app - double-entry ledger.

This app provides:
- Account: chart of accounts with parent hierarchy and reporting roles
- Transaction / Entry: balanced postings
- Voucher: payment, receipt and journal vouchers (draft -> approved -> posted)

All mutations go through accounting.commands so account balances stay
equal to the sum of their entries.
"""
