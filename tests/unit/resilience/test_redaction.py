"""PHI Redaction Test Suite"""

from dataclasses import dataclass

import pytest
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from medsim.core.resilience.redaction import PHI_FIELDS, is_phi_field, sanitize


class TestSanitize:
    """sanitize strips PHI keys and nothing else"""

    def test_removes_phi_fields(self):
        data = {
            "patientName": "John Doe",
            "email": "john@example.com",
            "phone": "555-0100",
            "ssn": "123-45-6789",
            "medicalRecordNumber": "MRN-1",
            "dateOfBirth": "1970-01-01",
            "address": "1 Main St",
            "insuranceNumber": "INS-9",
            "diagnosis": "Hypertension",
            "age": 45,
        }

        assert sanitize(data) == {"diagnosis": "Hypertension", "age": 45}

    def test_input_is_not_mutated(self):
        data = {"patientName": "John Doe", "age": 45}

        result = sanitize(data)

        assert result is not data
        assert data == {"patientName": "John Doe", "age": 45}

    def test_clean_data_is_copied_unchanged(self):
        data = {"age": 45, "diagnosis": "Flu"}

        result = sanitize(data)

        assert result == data
        assert result is not data

    @pytest.mark.parametrize("value", [None, "John Doe", 42, ["patientName"], ("ssn",)])
    def test_non_mappings_pass_through(self, value):
        assert sanitize(value) == value

    def test_nested_values_are_not_inspected(self):
        data = {"patient": {"patientName": "John Doe"}}
        assert sanitize(data) == data

    def test_matching_is_exact(self):
        data = {"PatientName": "x", "patient_name_hint": "y", "emails": ["z"]}
        assert sanitize(data) == data

    def test_snake_case_spellings(self):
        data = {"patient_name": "John Doe", "date_of_birth": "1970-01-01", "age": 45}
        assert sanitize(data) == {"age": 45}

    def test_idempotent(self):
        data = {"ssn": "123-45-6789", "age": 45}
        assert sanitize(sanitize(data)) == sanitize(data)


class PatientRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    patient_name: str
    diagnosis: str


@dataclass
class Contact:
    email: str
    phone: str
    preferred_time: str


class TestStructuredRecords:
    """Models and dataclasses are filtered like mappings"""

    def test_pydantic_model(self):
        record = PatientRecord(patient_name="John Doe", diagnosis="Flu")

        assert sanitize(record) == {"diagnosis": "Flu"}
        assert record.patient_name == "John Doe"

    def test_pydantic_model_without_aliases(self):
        class Visit(BaseModel):
            patient_name: str
            ward: str

        assert sanitize(Visit(patient_name="John Doe", ward="B2")) == {"ward": "B2"}

    def test_dataclass(self):
        contact = Contact(email="john@example.com", phone="555-0100", preferred_time="am")

        assert sanitize(contact) == {"preferred_time": "am"}
        assert contact.email == "john@example.com"

    def test_dataclass_type_passes_through(self):
        assert sanitize(Contact) is Contact


class TestPhiFields:

    def test_reference_fields_present(self):
        assert {
            "patientName",
            "email",
            "phone",
            "ssn",
            "medicalRecordNumber",
            "dateOfBirth",
            "address",
            "insuranceNumber",
        } <= PHI_FIELDS

    def test_is_phi_field(self):
        assert is_phi_field("ssn") is True
        assert is_phi_field("diagnosis") is False
        assert is_phi_field(1) is False
