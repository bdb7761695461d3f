# ============================================================================
# src/document_filing/constants/taxonomy.py
# ============================================================================
"""
Filing Taxonomy Defaults
- Canonical file types and categories
- Folder taxonomy (client vs project level)
- Category → folder fallback map
- Category abbreviations used for document naming

Hosts normally supply their own enumerations; these are the defaults used
when nothing else is configured.
"""

OTHER = "Other"
MISCELLANEOUS_FOLDER = "miscellaneous"

DEFAULT_FILE_TYPES = [
    'Appraisal', 'RedBook Valuation', 'Cashflow',
    'Floor Plans', 'Elevations', 'Sections', 'Site Plans', 'Location Plans',
    'Initial Monitoring Report', 'Interim Monitoring Report', 'Planning Documentation',
    'Contract Sum Analysis', 'Comparables', 'Building Survey', 'Report on Title',
    'Legal Opinion', 'Environmental Report', 'Local Authority Search',
    'Passport', 'Driving License', 'Utility Bill', 'Bank Statement',
    'Application Form', 'Assets & Liabilities Statement', 'Track Record',
    'Certificate of Incorporation', 'Company Search', 'Tax Return',
    'Indicative Terms', 'Credit Backed Terms',
    'Facility Letter', 'Personal Guarantee', 'Corporate Guarantee',
    'Terms & Conditions', 'Shareholders Agreement', 'Share Charge',
    'Debenture', 'Corporate Authorisations', 'Building Contract',
    'Professional Appointment', 'Collateral Warranty', 'Title Deed', 'Lease',
    'Accommodation Schedule', 'Build Programme',
    'Loan Statement', 'Redemption Statement', 'Completion Statement',
    'Invoice', 'Receipt', 'Insurance Policy', 'Insurance Certificate',
    'Email/Correspondence', 'Meeting Minutes',
    'NHBC Warranty', 'Latent Defects Insurance', 'Site Photographs',
    OTHER,
]

DEFAULT_CATEGORIES = [
    'Appraisals', 'Plans', 'Inspections', 'Professional Reports',
    'KYC', 'Loan Terms', 'Legal Documents', 'Project Documents',
    'Financial Documents', 'Insurance', 'Communications', 'Warranties',
    'Photographs', OTHER,
]

DEFAULT_FOLDERS = [
    {"folder_key": "background", "name": "Background", "level": "project"},
    {"folder_key": "terms_comparison", "name": "Terms Comparison", "level": "project"},
    {"folder_key": "credit_submission", "name": "Credit Submission", "level": "project"},
    {"folder_key": "appraisals", "name": "Appraisals", "level": "project"},
    {"folder_key": "notes", "name": "Notes", "level": "project"},
    {"folder_key": "operational_model", "name": "Operational Model", "level": "project"},
    {"folder_key": "post_completion", "name": "Post Completion", "level": "project"},
    {"folder_key": "kyc", "name": "KYC", "level": "client"},
    {"folder_key": "background_docs", "name": "Background Docs", "level": "client"},
    {"folder_key": MISCELLANEOUS_FOLDER, "name": "Miscellaneous", "level": "client"},
]

# Fallback when a proposed folder is not in the caller's taxonomy
CATEGORY_FOLDER_MAP = {
    'KYC': {"folder": "kyc", "level": "client"},
    'Appraisals': {"folder": "appraisals", "level": "project"},
    'Plans': {"folder": "background", "level": "project"},
    'Loan Terms': {"folder": "terms_comparison", "level": "project"},
    'Legal Documents': {"folder": "background", "level": "project"},
    'Financial Documents': {"folder": "operational_model", "level": "project"},
    'Inspections': {"folder": "credit_submission", "level": "project"},
    'Professional Reports': {"folder": "credit_submission", "level": "project"},
    'Project Documents': {"folder": "background", "level": "project"},
    'Insurance': {"folder": "credit_submission", "level": "project"},
    'Communications': {"folder": "background_docs", "level": "client"},
    'Warranties': {"folder": "post_completion", "level": "project"},
    'Photographs': {"folder": "background", "level": "project"},
    OTHER: {"folder": MISCELLANEOUS_FOLDER, "level": "client"},
}

TYPE_ABBREVIATIONS = {
    'Appraisals': 'APR',
    'Plans': 'PLN',
    'Inspections': 'INS',
    'Professional Reports': 'RPT',
    'KYC': 'KYC',
    'Loan Terms': 'TRM',
    'Legal Documents': 'LEG',
    'Project Documents': 'PRJ',
    'Financial Documents': 'FIN',
    'Insurance': 'INS',
    'Communications': 'COM',
    'Warranties': 'WAR',
    'Photographs': 'PHO',
    OTHER: 'OTH',
}

# Keyword hints used when a model-proposed category is not in the enumeration
CATEGORY_KEYWORDS = {
    'KYC': ['passport', 'id', 'identity', 'kyc', 'proof of', 'bank statement', 'track record'],
    'Appraisals': ['valuation', 'appraisal', 'rics', 'red book', 'market value'],
    'Plans': ['floor plan', 'elevation', 'section', 'site plan', 'architectural'],
    'Legal Documents': ['agreement', 'contract', 'legal', 'guarantee', 'debenture'],
    'Financial Documents': ['statement', 'invoice', 'receipt', 'financial'],
    'Professional Reports': ['report', 'survey', 'inspection', 'monitoring'],
}

# Types the models most often mix up, keyed by the type currently chosen
COMMON_CONFUSIONS = {
    'Other': ['Track Record', 'Bank Statement', 'ID Document'],
    'Track Record': ['Other', 'Appraisal'],
    'Proof of Address': ['Bank Statement', 'Utility Bill'],
    'ID Document': ['Passport', 'Driving License'],
}


def get_type_abbreviation(category: str) -> str:
    """Abbreviation for a category, 'DOC' when unknown."""
    return TYPE_ABBREVIATIONS.get(category, 'DOC')
