# accounting/serializers.py
"""
Serializers for the accounting API.

Note: These serializers are used for:
1. Input shape validation (types, required keys)
2. Output formatting

Business rules (balance, active accounts, state machine) live in
validation.py, policies.py and commands.py. Input serializers stay
permissive about amounts so that the command layer reports the
specific ledger error (negative amount, unbalanced entries, ...).
"""

from rest_framework import serializers

from .models import Account, Entry, Transaction, Voucher


# =============================================================================
# Account Serializers
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    parent_name = serializers.CharField(source="parent.name", read_only=True, default=None)
    type = serializers.CharField(source="account_type", read_only=True)

    class Meta:
        model = Account
        fields = [
            "id", "code", "name", "type", "role",
            "parent_id", "parent_name", "balance", "is_active",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class AccountInputSerializer(serializers.Serializer):
    """Create/update payload. Update is a full replace, like create."""
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=255)
    type = serializers.CharField(max_length=20)
    parent_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    role = serializers.ChoiceField(choices=Account.Role.choices, required=False)

    def to_command_kwargs(self) -> dict:
        data = self.validated_data
        kwargs = {
            "code": data["code"],
            "name": data["name"],
            "account_type": data["type"],
            "parent_id": data.get("parent_id"),
        }
        if "role" in data:
            kwargs["role"] = data["role"]
        return kwargs


# =============================================================================
# Transaction Serializers
# =============================================================================

class EntrySerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = Entry
        fields = [
            "id", "account_id", "account_code", "account_name",
            "debit_amount", "credit_amount", "description",
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    """Full transaction with resolved entries."""
    entries = EntrySerializer(many=True, read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Transaction
        fields = [
            "id", "transaction_number", "date", "description", "reference",
            "total_amount", "created_by_name", "entries",
            "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj):
        user = obj.created_by
        if user is None:
            return None
        return user.name or user.email


class EntryInputSerializer(serializers.Serializer):
    account_id = serializers.JSONField()
    debit_amount = serializers.JSONField(required=False, default=None)
    credit_amount = serializers.JSONField(required=False, default=None)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class TransactionInputSerializer(serializers.Serializer):
    """
    {date, description, reference?, entries: [{account_id, debit_amount?, credit_amount?, description?}]}

    Entry count, amounts and balance are checked by the validator, not here.
    """
    date = serializers.CharField()
    description = serializers.CharField(max_length=500, allow_blank=True)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    entries = EntryInputSerializer(many=True, allow_empty=True, required=False, default=list)

    def to_command_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "date": data["date"],
            "description": data["description"],
            "reference": data["reference"],
            "entries": [dict(entry) for entry in data["entries"]],
        }


# =============================================================================
# Voucher Serializers
# =============================================================================

class VoucherSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source="voucher_type", read_only=True)
    transaction_number = serializers.CharField(
        source="transaction.transaction_number", read_only=True, default=None,
    )

    class Meta:
        model = Voucher
        fields = [
            "id", "voucher_number", "type", "date", "payee", "amount",
            "description", "status", "transaction_id", "transaction_number",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class VoucherInputSerializer(serializers.Serializer):
    type = serializers.CharField(max_length=20, required=False)
    date = serializers.CharField()
    payee = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    amount = serializers.JSONField()
    description = serializers.CharField(required=False, allow_blank=True, default="")


class VoucherPostSerializer(serializers.Serializer):
    debit_account_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    credit_account_id = serializers.IntegerField(required=False, allow_null=True, default=None)
