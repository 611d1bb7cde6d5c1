"""Tests for principal lookup across the user and supplier stores."""

from __future__ import annotations

from aquapulse.application.services.principal_resolver import PrincipalResolver
from aquapulse.infrastructure.repositories.supplier_repository import SupplierRepository
from aquapulse.infrastructure.repositories.user_repository import UserRepository


class TestPrincipalResolver:
    def test_finds_user_and_supplier_by_id(
        self,
        resolver: PrincipalResolver,
        users: UserRepository,
        suppliers: SupplierRepository,
    ) -> None:
        user = users.create("customer@x.com", "hash", role="customer")
        supplier = suppliers.create("supplier@x.com", "hash", company="Agua Pura")

        found_user = resolver.find_by_id(user.id)
        found_supplier = resolver.find_by_id(supplier.id)

        assert found_user is not None and found_user.kind == "user"
        assert found_supplier is not None and found_supplier.kind == "supplier"
        assert found_supplier.role == "supplier"
        assert found_supplier.company == "Agua Pura"

    def test_email_lookup_is_normalised(
        self, resolver: PrincipalResolver, suppliers: SupplierRepository
    ) -> None:
        suppliers.create("supplier@x.com", "hash", company="Agua Pura")

        found = resolver.find_by_email("  Supplier@X.com ")

        assert found is not None
        assert found.email == "supplier@x.com"
        assert resolver.email_in_use("SUPPLIER@x.com")

    def test_unknown_principal(self, resolver: PrincipalResolver) -> None:
        assert resolver.find_by_id("missing") is None
        assert resolver.find_by_id("") is None
        assert resolver.find_by_email("nobody@x.com") is None
        assert not resolver.email_in_use("nobody@x.com")
        assert resolver.get_profile("missing") is None

    def test_profile_hides_credentials(
        self, resolver: PrincipalResolver, users: UserRepository
    ) -> None:
        user = users.create(
            "customer@x.com",
            "secret-hash",
            role="customer",
            first_name="Ana",
            email_verification_token="verify-me",
        )

        profile = resolver.get_profile(user.id)

        assert profile is not None
        assert profile["email"] == "customer@x.com"
        assert profile["first_name"] == "Ana"
        assert profile["kind"] == "user"
        assert "password_hash" not in profile
        assert "email_verification_token" not in profile
        assert "reset_password_code" not in profile
