"""
alpacabridge Unit Tests - Property Name Forms

Unit tests for alpacabridge/property_names.py.
Tests the wire/parameter/application name table and its fallback rules.

Run:
    pytest tests/unit/test_property_names.py -v
"""

import pytest


# =============================================================================
# Table Lookups
# =============================================================================

class TestNameTable:
    """Known names resolve through the static table."""

    def test_connected_aliases(self):
        """connected has an isConnected application alias."""
        from alpacabridge.property_names import (
            to_application_name,
            to_parameter_name,
            to_wire_name,
        )

        assert to_wire_name("connected") == "connected"
        assert to_parameter_name("connected") == "Connected"
        assert to_application_name("connected") == "isConnected"

    def test_acronym_forms(self):
        """Acronyms keep their casing in the parameter form only."""
        from alpacabridge.property_names import to_application_name, to_parameter_name

        assert to_parameter_name("cansetccdtemperature") == "CanSetCCDTemperature"
        assert to_application_name("cansetccdtemperature") == "canSetCcdTemperature"

    @pytest.mark.parametrize("name", ["rightascension", "rightAscension", "RightAscension"])
    def test_any_form_resolves(self, name):
        """Wire, application and parameter forms resolve to the same entry."""
        from alpacabridge.property_names import to_application_name, to_wire_name

        assert to_wire_name(name) == "rightascension"
        assert to_application_name(name) == "rightAscension"

    def test_application_alias_resolves_to_wire(self):
        """An application alias maps back to its wire name."""
        from alpacabridge.property_names import to_parameter_name, to_wire_name

        assert to_wire_name("isConnected") == "connected"
        assert to_parameter_name("isConnected") == "Connected"

    def test_lookup_unknown_returns_none(self):
        from alpacabridge.property_names import lookup

        assert lookup("frobnicate") is None


# =============================================================================
# Fallback Rules
# =============================================================================

class TestFallbacks:
    """Names absent from the table follow deterministic rules."""

    def test_wire_fallback_lowercases(self):
        from alpacabridge.property_names import to_wire_name

        assert to_wire_name("SomeVendorThing") == "somevendorthing"

    def test_parameter_fallback_capitalizes_first_letter(self):
        from alpacabridge.property_names import to_parameter_name

        assert to_parameter_name("vendorGain") == "VendorGain"

    def test_application_fallback_camel_cases_separators(self):
        from alpacabridge.property_names import to_application_name

        assert to_application_name("vendor_extra-gain") == "vendorExtraGain"
        assert to_application_name("VendorThing") == "vendorThing"

    def test_empty_name(self):
        from alpacabridge.property_names import (
            to_application_name,
            to_parameter_name,
            to_wire_name,
        )

        assert to_wire_name("") == ""
        assert to_parameter_name("") == ""
        assert to_application_name("") == ""

    def test_format_property_name_by_form(self):
        from alpacabridge.property_names import NameForm, format_property_name

        assert format_property_name("ismoving", NameForm.WIRE) == "ismoving"
        assert format_property_name("ismoving", NameForm.PARAMETER) == "IsMoving"
        assert format_property_name("ismoving", NameForm.APPLICATION) == "isMoving"


# =============================================================================
# Round Trips
# =============================================================================

class TestRoundTrip:
    """wire -> application -> wire is stable for every table entry."""

    def test_table_round_trip(self):
        from alpacabridge.property_names import (
            PROPERTY_NAME_TABLE,
            to_application_name,
            to_parameter_name,
            to_wire_name,
        )

        for wire in PROPERTY_NAME_TABLE:
            assert to_wire_name(to_application_name(wire)) == wire
            assert to_wire_name(to_parameter_name(wire)) == wire

    def test_unmapped_lowercase_name_is_its_own_application_form(self):
        from alpacabridge.property_names import to_application_name

        assert to_application_name("vendorgain") == "vendorgain"
