"""
Record schema definitions for the spreadsheet import system.

A schema describes the ordered, typed field list of one record shape, the
header aliases each field accepts on import, and the display names used on
export. The alias tables here are process-wide static configuration.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from backend.models.record import ParticipantRecord, PlacementRecord, RecordBase


class FieldType(str, Enum):
    """Cell coercion applied to a field."""

    TEXT = 'text'
    INTEGER = 'integer'
    BOOLEAN = 'boolean'
    DATE = 'date'


@dataclass(frozen=True)
class FieldSpec:
    """One canonical field: its type, export header and accepted import headers."""

    name: str
    display_name: str
    field_type: FieldType = FieldType.TEXT
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True, eq=False)
class RecordSchema:
    """
    Complete description of one record shape.

    Attributes:
        name: Schema key used in configuration
        record_model: Pydantic model class instantiated per row
        fields: Canonical fields in export order
        required: Fields whose header must be present for an import to proceed
        identity: Fields that, when all blank, mark a row as blank
        serial_field: Optional positional serial number column (legacy files)
        sheet_name: Worksheet title used on export
        template_examples: Illustrative rows written into the template
        template_notes: Usage notes written to the template's notes sheet
    """

    name: str
    record_model: Type[RecordBase]
    fields: Tuple[FieldSpec, ...]
    required: Tuple[str, ...] = ()
    identity: Tuple[str, ...] = ()
    serial_field: Optional[str] = None
    sheet_name: str = 'Records'
    template_examples: Tuple[Dict[str, Any], ...] = ()
    template_notes: Tuple[str, ...] = ()
    _by_name: Dict[str, FieldSpec] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        self._by_name.update({spec.name: spec for spec in self.fields})
        for name in self.required + self.identity:
            if name not in self._by_name:
                raise ValueError(f"Schema '{self.name}' references unknown field '{name}'")
        if self.serial_field and self.serial_field not in self._by_name:
            raise ValueError(f"Schema '{self.name}' has unknown serial field '{self.serial_field}'")

    @property
    def field_names(self) -> List[str]:
        return [spec.name for spec in self.fields]

    @property
    def display_names(self) -> List[str]:
        return [spec.display_name for spec in self.fields]

    def get_field(self, name: str) -> FieldSpec:
        return self._by_name[name]

    def alias_table(self) -> Dict[str, List[str]]:
        """Canonical field name -> ordered list of accepted header spellings."""
        return {spec.name: list(spec.aliases) for spec in self.fields}


PARTICIPANT_FIELDS = (
    FieldSpec('name', 'Name', aliases=('Name', 'First Name', 'FirstName')),
    FieldSpec('surname', 'Surname', aliases=('Surname', 'Last Name', 'LastName', 'Family Name')),
    FieldSpec('identifier', 'Identifier', aliases=('Identifier', 'ID', 'ID Number', 'IDNumber')),
    FieldSpec('email_address', 'Email Address',
              aliases=('EmailAddress', 'Email Address', 'Email')),
    FieldSpec('local_municipality', 'Local Municipality',
              aliases=('LocalMunicipality', 'Local Municipality', 'Municipality')),
    FieldSpec('host_company', 'Host Company', aliases=('HostCompany', 'Host Company', 'Host')),
    FieldSpec('lead_company', 'Lead Company', aliases=('LeadCompany', 'Lead Company', 'Lead')),
    FieldSpec('job_type', 'Job Type', aliases=('JobType', 'Job Type', 'Job', 'Occupation')),
    FieldSpec('demographic_group', 'Demographic Group',
              aliases=('DemographicGroup', 'Demographic Group', 'Demographic', 'Race', 'Group')),
    FieldSpec('sex', 'Sex', aliases=('Sex', 'Gender')),
    FieldSpec('contact_details', 'Contact Details',
              aliases=('ContactDetails', 'Contact Details', 'Contact', 'Phone', 'Cell')),
    FieldSpec('employment_status', 'Employment Status',
              aliases=('EmploymentStatus', 'Employment Status', 'Status')),
    FieldSpec('person_disability', 'Person Disability',
              aliases=('PersonDisability', 'Person Disability', 'Disability', 'PersonWithDisability')),
)

PARTICIPANT_SCHEMA = RecordSchema(
    name='participant',
    record_model=ParticipantRecord,
    fields=PARTICIPANT_FIELDS,
    required=('name', 'surname'),
    identity=('name', 'surname'),
    sheet_name='Participants',
    template_examples=(
        {'name': 'Jane', 'surname': 'Smith', 'identifier': '1234567890123',
         'email_address': 'jane@example.com', 'local_municipality': 'Cape Town',
         'host_company': 'KPMG', 'lead_company': 'Collective X', 'job_type': 'Data Analyst',
         'demographic_group': 'Youth', 'sex': 'Female', 'contact_details': '0821234567',
         'employment_status': 'Employed', 'person_disability': 'N'},
        {'name': 'John', 'surname': 'Doe', 'identifier': '9876543210987',
         'email_address': 'john@example.com', 'local_municipality': 'Stellenbosch',
         'host_company': 'Old Mutual', 'lead_company': 'Collective X', 'job_type': 'Tech Support',
         'demographic_group': 'Women', 'sex': 'Male', 'contact_details': '0831234567',
         'employment_status': 'Unemployed', 'person_disability': 'N'},
        {'name': 'Thabo', 'surname': 'Nkosi', 'identifier': '1111111111111',
         'email_address': 'thabo@example.com', 'local_municipality': 'George',
         'host_company': 'CallLab', 'lead_company': 'Collective X', 'job_type': 'Cloud Admin',
         'demographic_group': 'Youth', 'sex': 'Male', 'contact_details': '0841234567',
         'employment_status': 'Employed', 'person_disability': 'Y'},
    ),
    template_notes=(
        'Person Disability: use Y/Yes for disability, N/No for none',
        'Sex: Male / Female / Other',
        'Column order does not matter, headers are matched by name',
        'Name and Surname columns are required; rows with both blank are skipped',
    ),
)


PLACEMENT_FIELDS = (
    FieldSpec('serial_number', 'No.', FieldType.INTEGER, aliases=('No.', 'No', 'Serial', 'Serial Number')),
    FieldSpec('name', 'Name', aliases=('Name', 'First Name', 'FirstName')),
    FieldSpec('surname', 'Surname', aliases=('Surname', 'Last Name', 'LastName', 'Family Name')),
    FieldSpec('id_number', 'ID Number', aliases=('ID Number', 'IDNumber', 'ID', 'Identifier')),
    FieldSpec('email_address', 'Email Address', aliases=('EmailAddress', 'Email Address', 'Email')),
    FieldSpec('contact_number', 'Contact Number',
              aliases=('Contact Number', 'ContactNumber', 'Contact', 'Phone', 'Cell')),
    FieldSpec('age', 'Age', FieldType.INTEGER, aliases=('Age',)),
    FieldSpec('gender', 'Gender', aliases=('Gender', 'Sex')),
    FieldSpec('race', 'Race', aliases=('Race', 'Demographic Group', 'DemographicGroup')),
    FieldSpec('disability', 'Disability', FieldType.BOOLEAN,
              aliases=('Disability', 'Person Disability', 'PersonDisability')),
    FieldSpec('municipality', 'Municipality',
              aliases=('Municipality', 'Local Municipality', 'LocalMunicipality')),
    FieldSpec('host_company', 'Host Company', aliases=('Host Company', 'HostCompany', 'Host')),
    FieldSpec('job_title', 'Job Title', aliases=('Job Title', 'JobTitle', 'Job Type', 'JobType', 'Job')),
    FieldSpec('start_date', 'Start Date', FieldType.DATE, aliases=('Start Date', 'StartDate', 'Start')),
    FieldSpec('end_date', 'End Date', FieldType.DATE, aliases=('End Date', 'EndDate', 'End')),
    FieldSpec('monthly_stipend', 'Monthly Stipend', FieldType.INTEGER,
              aliases=('Monthly Stipend', 'MonthlyStipend', 'Stipend')),
    FieldSpec('employed', 'Employed', FieldType.BOOLEAN, aliases=('Employed', 'Currently Employed')),
    FieldSpec('comments', 'Comments', aliases=('Comments', 'Notes', 'Remarks')),
)

PLACEMENT_SCHEMA = RecordSchema(
    name='placement',
    record_model=PlacementRecord,
    fields=PLACEMENT_FIELDS,
    required=('name', 'surname'),
    identity=('name', 'surname'),
    serial_field='serial_number',
    sheet_name='Placements',
    template_examples=(
        {'serial_number': 1, 'name': 'Jane', 'surname': 'Smith', 'id_number': '1234567890123',
         'email_address': 'jane@example.com', 'contact_number': '0821234567', 'age': 24,
         'gender': 'Female', 'race': 'Black', 'disability': False, 'municipality': 'Cape Town',
         'host_company': 'KPMG', 'job_title': 'Data Analyst', 'start_date': date(2025, 2, 1),
         'end_date': date(2026, 1, 31), 'monthly_stipend': 6500, 'employed': True,
         'comments': ''},
        {'serial_number': 2, 'name': 'Thabo', 'surname': 'Nkosi', 'id_number': '1111111111111',
         'email_address': 'thabo@example.com', 'contact_number': '0841234567', 'age': 29,
         'gender': 'Male', 'race': 'Black', 'disability': True, 'municipality': 'George',
         'host_company': 'CallLab', 'job_title': 'Cloud Admin', 'start_date': date(2025, 3, 1),
         'end_date': None, 'monthly_stipend': 5000, 'employed': False,
         'comments': 'Awaiting contract'},
    ),
    template_notes=(
        'No.: optional serial number; identifiers are assigned on import',
        'Disability / Employed: use Y/Yes/True/1 for yes, anything else is no',
        'Start Date / End Date: a date cell or text such as 2025-02-01',
        'Column order does not matter, headers are matched by name',
    ),
)


SCHEMAS: Dict[str, RecordSchema] = {
    PARTICIPANT_SCHEMA.name: PARTICIPANT_SCHEMA,
    PLACEMENT_SCHEMA.name: PLACEMENT_SCHEMA,
}


def get_schema(name: str) -> RecordSchema:
    """Look up a schema by its configuration key."""
    try:
        return SCHEMAS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown record schema '{name}'. Available schemas: {', '.join(sorted(SCHEMAS))}"
        ) from None
