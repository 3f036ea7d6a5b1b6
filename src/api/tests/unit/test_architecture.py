"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between layers
within the Accounts bounded context.
"""

from pytest_archon import archrule


class TestAccountsDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_infrastructure(self):
        """Domain layer should not depend on infrastructure.

        The domain layer holds the ledger, inventory and roster rules and
        should not know about the database or the remote services.
        """
        (
            archrule("domain_no_infrastructure")
            .match("accounts.domain*")
            .should_not_import("accounts.infrastructure*", "infrastructure*")
            .check("accounts")
        )

    def test_domain_does_not_import_application(self):
        """Domain objects should be usable without application services."""
        (
            archrule("domain_no_application")
            .match("accounts.domain*")
            .should_not_import("accounts.application*")
            .check("accounts")
        )

    def test_domain_does_not_import_ports(self):
        """Ports depend on the domain, not the other way around."""
        (
            archrule("domain_no_ports")
            .match("accounts.domain*")
            .should_not_import("accounts.ports*")
            .check("accounts")
        )

    def test_domain_does_not_import_frameworks(self):
        """Domain objects should be framework-agnostic."""
        (
            archrule("domain_no_frameworks")
            .match("accounts.domain*")
            .should_not_import(
                "fastapi*", "starlette*", "sqlalchemy*", "httpx*", "pydantic*"
            )
            .check("accounts")
        )


class TestAccountsPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_does_not_import_infrastructure(self):
        """Ports define interfaces and must not know the HTTP or SQL adapters."""
        (
            archrule("ports_no_infrastructure")
            .match("accounts.ports*")
            .should_not_import("accounts.infrastructure*", "httpx*", "sqlalchemy*")
            .check("accounts")
        )

    def test_ports_does_not_import_application(self):
        """Ports are used by the application layer, not the other way around."""
        (
            archrule("ports_no_application")
            .match("accounts.ports*")
            .should_not_import("accounts.application*")
            .check("accounts")
        )


class TestAccountsApplicationLayerBoundaries:
    """Tests that application services depend on ports only."""

    def test_application_does_not_import_infrastructure(self):
        """Services receive adapters through their constructor."""
        (
            archrule("application_no_infrastructure")
            .match("accounts.application*")
            .should_not_import("accounts.infrastructure*", "httpx*")
            .check("accounts")
        )

    def test_application_does_not_import_presentation(self):
        """Services should not know about HTTP request or response models."""
        (
            archrule("application_no_presentation")
            .match("accounts.application*")
            .should_not_import("accounts.presentation*", "fastapi*")
            .check("accounts")
        )


class TestAccountsPresentationLayerBoundaries:
    """Tests that routes go through application services."""

    def test_presentation_does_not_import_infrastructure(self):
        """Routes reach adapters only through the dependency wiring."""
        (
            archrule("presentation_no_infrastructure")
            .match("accounts.presentation*")
            .should_not_import("accounts.infrastructure*")
            .check("accounts")
        )
