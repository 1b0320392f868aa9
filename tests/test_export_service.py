"""
Tests for workbook export and template generation.
"""

import io
from datetime import date

import openpyxl

from backend.models.record import ParticipantRecord, PlacementRecord
from services.excel_import_service import ExcelImportService
from services.export_service import IDENTIFIER_HEADER, ExcelExportService
from services.record_store import RecordStore


def _load(data):
    return openpyxl.load_workbook(io.BytesIO(data))


def _rows(worksheet):
    return [list(row) for row in worksheet.iter_rows(values_only=True)]


class TestExport:
    """Test ExcelExportService.export()."""

    def test_header_row(self, exporter, schema):
        worksheet = _load(exporter.export([])).active

        assert worksheet.title == 'Participants'
        assert _rows(worksheet)[0] == [IDENTIFIER_HEADER] + schema.display_names

    def test_rows_follow_store_order(self, exporter, store):
        store.add(ParticipantRecord(name='Jane', surname='Smith', person_disability='N'))
        store.add(ParticipantRecord(name='John', surname='Doe', email_address='john@x.com'))

        rows = _rows(_load(exporter.export(store.get_all())).active)

        assert len(rows) == 3
        assert rows[1][:3] == [1, 'Jane', 'Smith']
        assert rows[2][:3] == [2, 'John', 'Doe']
        assert rows[2][4] == 'john@x.com'

    def test_header_styling(self, exporter):
        worksheet = _load(exporter.export([])).active
        header = worksheet['A1']

        assert header.font.bold is True
        assert header.fill.start_color.rgb == 'FF1074D6'
        assert worksheet.freeze_panes == 'A2'

    def test_typed_cells(self, store, placement_schema):
        """Booleans export as Y/N and dates as date cells."""
        exporter = ExcelExportService(placement_schema)
        store.add(PlacementRecord(name='Jane', surname='Smith', disability=True, employed=False,
                                  start_date=date(2025, 2, 1), age=24))

        worksheet = _load(exporter.export(store.get_all())).active
        headers = _rows(worksheet)[0]
        row = _rows(worksheet)[1]

        assert row[headers.index('Disability')] == 'Y'
        assert row[headers.index('Employed')] == 'N'
        assert row[headers.index('Age')] == 24
        assert row[headers.index('Start Date')].date() == date(2025, 2, 1)
        assert row[headers.index('End Date')] is None


class TestRoundTrip:
    """Exported workbooks import back to the same records."""

    def test_participant_round_trip(self, exporter, importer, store, make_workbook, participant_rows):
        headers, rows = participant_rows
        importer.import_bytes(make_workbook(headers, rows))
        before = [r.model_dump() for r in store.get_all()]

        target = RecordStore()
        result = ExcelImportService(target).import_bytes(exporter.export(store.get_all()))

        assert result.imported_count == 3
        assert result.failed_count == 0
        assert [r.model_dump() for r in target.get_all()] == before

    def test_placement_round_trip(self, placement_schema):
        source = RecordStore()
        source.add(PlacementRecord(name='Jane', surname='Smith', age=24, disability=True,
                                   start_date=date(2025, 2, 1), monthly_stipend=6500,
                                   email_address='jane@example.com'))
        source.add(PlacementRecord(name='John', surname='Doe', employed=True))
        data = ExcelExportService(placement_schema).export(source.get_all())

        target = RecordStore()
        ExcelImportService(target, placement_schema).import_bytes(data)

        exported = [r.model_dump(exclude={'serial_number'}) for r in source.get_all()]
        imported = [r.model_dump(exclude={'serial_number'}) for r in target.get_all()]
        assert imported == exported

    def test_formula_like_text_stays_text(self, exporter, store):
        """Text beginning with '=' is written as text and imports back unchanged."""
        store.add(ParticipantRecord(name='=Jane', surname='=Smith', job_type='=1+1'))
        data = exporter.export(store.get_all())

        row = _rows(_load(data).active)[1]
        assert row[1:3] == ['=Jane', '=Smith']

        target = RecordStore()
        result = ExcelImportService(target).import_bytes(data)

        assert result.imported_count == 1
        assert [r.model_dump() for r in target.get_all()] == [r.model_dump() for r in store.get_all()]

    def test_control_characters_dropped(self, exporter, store):
        """Characters a worksheet cannot hold are removed instead of failing the export."""
        store.add(ParticipantRecord(name='Jane\x01', surname='Smi\x0bth', job_type='Line\x00'))

        row = _rows(_load(exporter.export(store.get_all())).active)[1]

        assert row[1:3] == ['Jane', 'Smith']
        assert row[8] == 'Line'


class TestTemplate:
    """Test ExcelExportService.generate_template()."""

    def test_template_layout(self, exporter, schema):
        workbook = _load(exporter.generate_template())

        assert workbook.sheetnames == ['Template', 'Notes']
        rows = _rows(workbook['Template'])
        assert rows[0] == schema.display_names
        assert len(rows) == 1 + len(schema.template_examples)
        assert rows[1][:2] == ['Jane', 'Smith']

    def test_notes_sheet(self, exporter, schema):
        notes = _rows(_load(exporter.generate_template())['Notes'])
        assert notes[0] == ['Notes:']
        assert [row[0] for row in notes[1:]] == list(schema.template_notes)

    def test_template_imports_its_examples(self, exporter, importer, store, schema):
        """Importing the template yields exactly the example rows; notes are ignored."""
        result = importer.import_bytes(exporter.generate_template())

        assert result.imported_count == len(schema.template_examples)
        assert result.skipped_count == 0
        assert [(r.name, r.surname) for r in store.get_all()] == [
            (example['name'], example['surname']) for example in schema.template_examples
        ]
        assert store.get_all()[2].has_disability is True

    def test_placement_template_imports(self, placement_schema):
        store = RecordStore()
        data = ExcelExportService(placement_schema).generate_template()

        result = ExcelImportService(store, placement_schema).import_bytes(data)

        assert result.imported_count == 2
        records = store.get_all()
        assert records[0].start_date == date(2025, 2, 1)
        assert records[1].end_date is None
        assert records[1].comments == 'Awaiting contract'
