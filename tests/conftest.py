# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import json

import pytest

from src.document_filing.core.context.checklist import ChecklistItem
from src.document_filing.core.context.enums import ChecklistStatus
from src.document_filing.core.context.pipeline_io import PipelineInput
from src.document_filing.core.context.processing_context import FilingContext
from src.document_filing.core.context.summary import (
    DocumentCharacteristics,
    DocumentEntities,
    DocumentSummary,
)
from src.document_filing.core.context.taxonomy import FilingTaxonomy
from src.document_filing.llm.base import BaseCompletionClient
from src.document_filing.references.registry import clear_registry
from src.utils.exceptions import TransientServiceError


class FakeCompletionClient(BaseCompletionClient):
    """
    Scripted completion client.

    Each generate() call pops the next response: dicts/lists are returned
    as JSON text, strings verbatim, exceptions are raised.
    """

    def __init__(self, responses=None):
        super().__init__({})
        self.responses = list(responses or [])
        self.prompts = []
        self.calls = []

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def generate(self, prompt, max_tokens=None, temperature=None):
        self.prompts.append(prompt)
        self.calls.append({"max_tokens": max_tokens, "temperature": temperature})
        if not self.responses:
            raise TransientServiceError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        text = response if isinstance(response, str) else json.dumps(response)
        return {"text": text, "model": self.model_name}


@pytest.fixture
def fake_client_factory():
    """Build FakeCompletionClient instances from a response script"""
    return FakeCompletionClient


@pytest.fixture
def passport_text():
    """Extracted text of a scanned UK passport photo page"""
    return """
    UNITED KINGDOM OF GREAT BRITAIN AND NORTHERN IRELAND
    PASSPORT

    Type: P    Code: GBR    Passport No: 123456789
    Surname: SMITH
    Given names: JOHN ALEXANDER
    Nationality: BRITISH CITIZEN
    Date of birth: 01 JAN 1980
    Place of birth: LONDON
    Date of issue: 15 MAR 2020    Date of expiry: 15 MAR 2030
    Authority: HMPO

    P<GBRSMITH<<JOHN<ALEXANDER<<<<<<<<<<<<<<<<<<<<
    1234567890GBR8001014M3003159<<<<<<<<<<<<<<<04
    """


@pytest.fixture
def track_record_text():
    """Extracted text of a developer track record schedule"""
    return """
    DEVELOPER EXPERIENCE SCHEDULE - HARBOUR HOMES LTD

    Completed schemes 2015-2023:
    1. Riverside Court, Bristol - 24 apartments, GDV GBP 6.2m, completed 2016
    2. Mill Lane, Bath - 8 houses, GDV GBP 4.1m, completed 2018
    3. The Maltings, Frome - 14 units, GDV GBP 5.5m, completed 2021
    4. Station Yard, Yeovil - 31 apartments, GDV GBP 8.9m, completed 2023

    All schemes delivered on programme and sold or let within 9 months of practical completion.
    """


@pytest.fixture
def passport_summary_payload():
    """Summary stage response for a passport"""
    return {
        "documentDescription": "UK passport photo page",
        "documentPurpose": "Identity verification of the borrower",
        "entities": {"people": ["John Smith"], "companies": [], "locations": ["London"], "projects": []},
        "keyTerms": ["passport", "nationality", "date of birth", "machine readable zone"],
        "keyDates": ["01 JAN 1980", "15 MAR 2030"],
        "keyAmounts": [],
        "executiveSummary": "Passport photo page for John Smith, a British citizen.",
        "detailedSummary": "Passport photo page with MRZ lines, passport number and expiry date.",
        "documentCharacteristics": {"isIdentity": True},
        "rawContentType": "Passport",
        "confidenceInAnalysis": 0.95,
    }


@pytest.fixture
def passport_summary(passport_summary_payload):
    """DocumentSummary for a passport"""
    return DocumentSummary.from_response(passport_summary_payload)


@pytest.fixture
def blank_summary():
    """Summary with no characteristic flags or key terms"""
    return DocumentSummary(
        document_description="Document",
        document_purpose="Unknown",
        entities=DocumentEntities(),
        key_terms=[],
        key_dates=[],
        key_amounts=[],
        executive_summary="Nothing notable",
        detailed_summary="Nothing notable",
        characteristics=DocumentCharacteristics(),
        raw_content_type="Unknown",
        confidence_in_analysis=0.5,
    )


@pytest.fixture
def taxonomy():
    """Default filing taxonomy"""
    return FilingTaxonomy()


@pytest.fixture
def checklist_items():
    """Outstanding client checklist"""
    return [
        ChecklistItem(
            id="kyc-passport",
            name="Passport",
            category="KYC",
            matching_document_types=["Passport"],
        ),
        ChecklistItem(
            id="kyc-poa",
            name="Proof of Address",
            category="KYC",
            matching_document_types=["Utility Bill", "Bank Statement"],
        ),
        ChecklistItem(
            id="kyc-track-record",
            name="Developer Track Record",
            category="KYC",
            matching_document_types=["Track Record"],
        ),
        ChecklistItem(
            id="kyc-old",
            name="Certificate of Incorporation",
            category="KYC",
            status=ChecklistStatus.FULFILLED,
            linked_document_count=1,
        ),
    ]


@pytest.fixture
def make_context(taxonomy):
    """Build a FilingContext for a file name and text"""
    def _make(file_name="Smith_Passport.pdf", text="x" * 500, **kwargs):
        return FilingContext(
            input=PipelineInput(extracted_text=text, file_name=file_name),
            taxonomy=kwargs.pop("taxonomy", taxonomy),
            **kwargs
        )
    return _make


@pytest.fixture(autouse=True)
def reset_registry():
    """Each test starts from the built-in reference catalogue"""
    clear_registry()
    yield
    clear_registry()
