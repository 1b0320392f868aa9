"""
Unit tests for single-row parsing.
"""

from datetime import date

from services.column_resolver import resolve_columns
from services.row_parser import RowStatus, is_blank_row, parse_row


class TestBlankRows:
    """Test blank-row detection."""

    def test_identity_fields_blank(self, schema):
        """A row with blank name and surname is blank even with other data."""
        mapping = resolve_columns(['Surname', 'Name', 'Email'], schema)
        assert is_blank_row(['', '  ', 'x@y.com'], mapping, schema)
        assert is_blank_row([None, None, None], mapping, schema)

    def test_one_identity_field_is_enough(self, schema):
        mapping = resolve_columns(['Surname', 'Name'], schema)
        assert not is_blank_row(['Doe', None], mapping, schema)
        assert not is_blank_row([None, 'John'], mapping, schema)

    def test_short_row(self, schema):
        """Rows shorter than the header are padded with empty cells."""
        mapping = resolve_columns(['Email', 'Name', 'Surname'], schema)
        assert is_blank_row(['x@y.com'], mapping, schema)


class TestParseRow:
    """Test parse_row()."""

    def test_parsed_record(self, schema):
        mapping = resolve_columns(['Surname', 'Name', 'Email', 'Disability'], schema)
        outcome = parse_row([' Doe ', 'John', 'john@x.com', 'Yes'], 2, mapping, schema)

        assert outcome.status == RowStatus.PARSED
        assert outcome.row_index == 2
        record = outcome.record
        assert record.name == 'John'
        assert record.surname == 'Doe'
        assert record.email_address == 'john@x.com'
        assert record.full_name == 'John Doe'
        assert record.has_disability is True
        assert record.row_number == 0

    def test_unmapped_text_fields_are_empty(self, schema):
        """Fields without a column are empty strings, never None."""
        mapping = resolve_columns(['Name', 'Surname'], schema)
        record = parse_row(['Jane', 'Smith'], 2, mapping, schema).record

        assert record.host_company == ''
        assert record.identifier == ''

    def test_numeric_cells_become_text(self, schema):
        mapping = resolve_columns(['Name', 'Surname', 'ID Number', 'Phone'], schema)
        record = parse_row(['Jane', 'Smith', 9876543210987, 821234567], 2, mapping, schema).record

        assert record.identifier == '9876543210987'
        assert record.contact_details == '821234567'

    def test_blank_outcome(self, schema):
        mapping = resolve_columns(['Surname', 'Name', 'Email'], schema)
        outcome = parse_row(['', '', 'x@y.com'], 4, mapping, schema)

        assert outcome.status == RowStatus.BLANK
        assert outcome.record is None
        assert outcome.error is None

    def test_construction_failure_is_an_outcome(self, schema):
        """A record that fails validation is reported, not raised."""
        mapping = resolve_columns(['Name', 'Surname', 'Email'], schema)
        outcome = parse_row(['John', 'Doe', 'not an email'], 5, mapping, schema)

        assert outcome.status == RowStatus.FAILED
        assert outcome.row_index == 5
        assert outcome.record is None
        assert 'email_address' in outcome.error


class TestParseTypedRow:
    """Test parse_row() with the typed placement schema."""

    def test_typed_fields(self, placement_schema):
        headers = ['No.', 'Name', 'Surname', 'Age', 'Disability', 'Start Date', 'End Date',
                   'Stipend', 'Employed']
        mapping = resolve_columns(headers, placement_schema)
        values = [7, 'Jane', 'Smith', '24.0', 'y', '2025-02-01', None, 6500.75, 'FALSE']

        outcome = parse_row(values, 3, mapping, placement_schema)

        assert outcome.status == RowStatus.PARSED
        assert outcome.serial == 7
        record = outcome.record
        assert record.serial_number == 7
        assert record.age == 24
        assert record.disability is True
        assert record.start_date == date(2025, 2, 1)
        assert record.end_date is None
        assert record.monthly_stipend == 6500
        assert record.employed is False

    def test_unparseable_typed_values_fall_back(self, placement_schema):
        """Bad numbers become 0 and bad dates become None; the row still parses."""
        mapping = resolve_columns(['Name', 'Surname', 'Age', 'Start Date'], placement_schema)
        outcome = parse_row(['Jane', 'Smith', 'twenty', 'soon'], 2, mapping, placement_schema)

        assert outcome.status == RowStatus.PARSED
        assert outcome.record.age == 0
        assert outcome.record.start_date is None
