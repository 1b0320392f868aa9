"""
Unit tests for header-to-field column resolution.
"""

from services.column_resolver import index_headers, missing_required, resolve_columns


class TestIndexHeaders:
    """Test index_headers()."""

    def test_case_folded_lookup(self):
        """Headers are indexed case-insensitively."""
        index = index_headers(['Name', 'SURNAME', 'email'])
        assert index == {'name': 0, 'surname': 1, 'email': 2}

    def test_blank_headers_ignored(self):
        """Blank and whitespace-only header cells are never registered."""
        index = index_headers([None, '', '   ', 'Name'])
        assert index == {'name': 3}

    def test_first_duplicate_wins(self):
        """The earliest occurrence of a repeated header is authoritative."""
        index = index_headers(['Name', 'Surname', 'name'])
        assert index['name'] == 0

    def test_headers_are_trimmed(self):
        """Surrounding whitespace does not affect matching."""
        index = index_headers(['  Name  '])
        assert index == {'name': 0}


class TestResolveColumns:
    """Test resolve_columns() against the participant schema."""

    def test_order_independence(self, schema):
        """Permuted headers resolve every field to its own column."""
        forward = resolve_columns(['Name', 'Surname', 'Email'], schema)
        backward = resolve_columns(['Email', 'Surname', 'Name'], schema)

        assert forward.positions == {'name': 0, 'surname': 1, 'email_address': 2}
        assert backward.positions == {'name': 2, 'surname': 1, 'email_address': 0}

    def test_alias_spellings(self, schema):
        """Any alias of a field resolves to that field."""
        for header in ['EmailAddress', 'Email Address', 'Email', 'EMAIL ADDRESS', 'email']:
            mapping = resolve_columns(['Name', header], schema)
            assert mapping.position_of('email_address') == 1, header

    def test_alias_precedence(self, schema):
        """The first alias in the field's list wins, regardless of column order."""
        mapping = resolve_columns(['Email', 'Email Address', 'EmailAddress'], schema)
        assert mapping.position_of('email_address') == 2
        assert mapping.matched_headers['email_address'] == 'EmailAddress'

    def test_exact_match_only(self, schema):
        """Near-miss spellings do not match."""
        mapping = resolve_columns(['E-mail', 'Names', 'Sur name'], schema)
        assert mapping.positions == {}
        assert mapping.unmapped_headers == ['E-mail', 'Names', 'Sur name']

    def test_superset_and_subset(self, schema):
        """Unknown extra columns are reported, missing optional fields are unresolved."""
        mapping = resolve_columns(['Notes', 'First Name', 'Last Name', 'Shoe Size'], schema)

        assert mapping.positions == {'name': 1, 'surname': 2}
        assert 'host_company' not in mapping
        assert mapping.unmapped_headers == ['Notes', 'Shoe Size']

    def test_non_text_headers(self, schema):
        """Numeric header cells are stringified before matching."""
        mapping = resolve_columns([1, 'Name', 'Surname'], schema)
        assert mapping.positions == {'name': 1, 'surname': 2}
        assert mapping.unmapped_headers == ['1']


class TestMissingRequired:
    """Test missing_required()."""

    def test_all_present(self, schema):
        mapping = resolve_columns(['Surname', 'Name'], schema)
        assert missing_required(mapping, schema) == []

    def test_missing_field_reported(self, schema):
        """A required field with none of its aliases present is reported."""
        mapping = resolve_columns(['Name', 'Email'], schema)
        assert missing_required(mapping, schema) == ['surname']

    def test_missing_in_schema_order(self, schema):
        mapping = resolve_columns(['Email'], schema)
        assert missing_required(mapping, schema) == ['name', 'surname']
