# ============================================================================
# src/document_filing/constants/filename_patterns.py
# ============================================================================
"""
Filename Pattern Tables
- FILENAME_PATTERNS: ordered keyword → (fileType, category, folder) hints.
  First match wins, so more specific entries must precede broader ones
  (Share Charge before Shareholders Agreement).
- CHECKLIST_PATTERN_ALIASES: shorthand used in filenames for common
  checklist requirements.

Keywords are matched against the normalized filename (lowercase,
separators collapsed to single spaces), so trailing spaces in keywords such
as 'cv ' act as word boundaries.
"""

def _p(keywords, file_type, category, folder, exclude_if=None):
    return {
        "keywords": keywords,
        "file_type": file_type,
        "category": category,
        "folder": folder,
        "exclude_if": exclude_if or [],
    }


FILENAME_PATTERNS = [
    # KYC - identity (client level)
    _p(['passport', 'biodata', 'travel document', 'mrz'], 'Passport', 'KYC', 'kyc',
       ['photo', 'background', 'template', 'guide', 'instructions']),
    _p(['driver', 'driving', 'license', 'licence', 'dvla'], 'Driving License', 'KYC', 'kyc',
       ['software', 'directions', 'template', 'guide', 'manual', 'key']),
    _p(['proof of id', 'proofofid', 'poi', 'id card', 'national id', 'identification', 'id document', 'iddoc'],
       'ID Document', 'KYC', 'kyc'),

    # KYC - address
    _p(['proof of address', 'proofofaddress', 'poa', 'address proof'], 'Proof of Address', 'KYC', 'kyc'),
    _p(['utility bill', 'gas bill', 'electric bill', 'electricity bill', 'water bill', 'council tax'],
       'Utility Bill', 'KYC', 'kyc'),

    # KYC - financial
    _p(['bank statement', 'bankstatement', 'business statement', 'personal statement', 'account statement',
        'current account'], 'Bank Statement', 'KYC', 'kyc'),
    _p(['assets', 'liabilities', 'net worth', 'a&l', 'statement of affairs'],
       'Assets & Liabilities Statement', 'KYC', 'kyc'),
    _p(['application form', 'loan application', 'finance application'], 'Application Form', 'KYC', 'kyc'),
    _p(['track record', 'trackrecord', 'cv ', 'resume', 'curriculum vitae', 'developer cv'],
       'Track Record', 'KYC', 'kyc'),
    _p(['company search', 'companies house', 'ch search'], 'Company Search', 'KYC', 'kyc'),
    _p(['certificate of incorporation', 'incorporation', 'company certificate'],
       'Certificate of Incorporation', 'KYC', 'kyc'),
    _p(['tax return', 'sa302', 'tax computation', 'corporation tax'], 'Tax Return', 'Financial Documents', 'kyc'),

    # Appraisals
    _p(['valuation', 'red book', 'redbook', 'rics', 'market value'], 'RedBook Valuation', 'Appraisals', 'appraisals',
       ['methodology', 'guide', 'template', 'manual', 'training', 'instructions']),
    _p(['appraisal', 'development appraisal', 'feasibility', 'residual'], 'Appraisal', 'Appraisals', 'appraisals'),
    _p(['cashflow', 'cash flow', 'dcf'], 'Cashflow', 'Appraisals', 'appraisals'),
    _p(['comparables', 'comps', 'comparable evidence', 'market evidence'],
       'Comparables', 'Professional Reports', 'appraisals'),

    # Plans
    _p(['floor plan', 'floorplan', 'floorplans'], 'Floor Plans', 'Plans', 'background',
       ['discussion', 'notes', 'meeting', 'template', 'guide', 'review']),
    _p(['elevation', 'elevations'], 'Elevations', 'Plans', 'background'),
    _p(['section', 'sections', 'cross section'], 'Sections', 'Plans', 'background'),
    _p(['site plan', 'siteplan', 'site layout'], 'Site Plans', 'Plans', 'background'),
    _p(['location plan', 'ordnance survey', 'os map'], 'Location Plans', 'Plans', 'background'),

    # Inspections
    _p(['initial monitoring', 'imr', 'pre-funding monitoring', 'initial report'],
       'Initial Monitoring Report', 'Inspections', 'credit_submission'),
    _p(['interim monitoring', 'monitoring report', 'ims report', 'progress report', 'monthly monitoring',
        'qs report'], 'Interim Monitoring Report', 'Inspections', 'credit_submission'),

    # Professional reports
    _p(['planning decision', 'planning permission', 'decision notice', 'planning notice', 'planning approval',
        'planning consent'], 'Planning Documentation', 'Professional Reports', 'background'),
    _p(['contract sum analysis', 'csa', 'cost plan', 'construction budget', 'build cost'],
       'Contract Sum Analysis', 'Professional Reports', 'credit_submission'),
    _p(['building survey', 'structural survey', 'condition report', 'survey report'],
       'Building Survey', 'Professional Reports', 'credit_submission'),
    _p(['report on title', 'title report', 'certificate of title', 'rot'],
       'Report on Title', 'Professional Reports', 'credit_submission'),
    _p(['legal opinion', 'legal advice', 'counsel opinion'], 'Legal Opinion', 'Professional Reports',
       'credit_submission'),
    _p(['environmental', 'phase 1', 'phase 2', 'contamination', 'environmental search'],
       'Environmental Report', 'Professional Reports', 'credit_submission'),
    _p(['local authority search', 'local search', 'council search', 'la search'],
       'Local Authority Search', 'Professional Reports', 'credit_submission'),

    # Loan terms
    _p(['indicative terms', 'heads of terms', 'hot', 'initial terms'], 'Indicative Terms', 'Loan Terms',
       'terms_comparison'),
    _p(['credit backed terms', 'credit approved', 'approved terms', 'cbt'], 'Credit Backed Terms', 'Loan Terms',
       'terms_comparison'),
    _p(['term sheet', 'termsheet'], 'Term Sheet', 'Loan Terms', 'terms_comparison'),

    # Legal documents
    _p(['facility letter', 'facility agreement', 'loan agreement'], 'Facility Letter', 'Legal Documents',
       'post_completion'),
    _p(['personal guarantee', 'pg '], 'Personal Guarantee', 'Legal Documents', 'post_completion'),
    _p(['corporate guarantee', 'company guarantee'], 'Corporate Guarantee', 'Legal Documents', 'post_completion'),
    # 'sha ' is broad, keep Share Charge first
    _p(['share charge', 'sharecharge'], 'Share Charge', 'Legal Documents', 'post_completion'),
    _p(['shareholders agreement', 'sha ', 'jv agreement'], 'Shareholders Agreement', 'Legal Documents',
       'post_completion'),
    _p(['debenture', 'fixed charge', 'floating charge'], 'Debenture', 'Legal Documents', 'post_completion'),
    _p(['board resolution', 'corporate resolution', 'authorization', 'authorisation'],
       'Corporate Authorisations', 'Legal Documents', 'post_completion'),
    _p(['building contract', 'construction contract', 'jct'], 'Building Contract', 'Legal Documents',
       'credit_submission'),
    _p(['professional appointment', 'architect appointment', 'consultant appointment'],
       'Professional Appointment', 'Legal Documents', 'credit_submission'),
    _p(['collateral warranty', 'third party warranty'], 'Collateral Warranty', 'Legal Documents',
       'post_completion'),
    _p(['title deed', 'land registry', 'registered title'], 'Title Deed', 'Legal Documents', 'background'),
    _p(['lease', 'tenancy agreement', 'rental agreement'], 'Lease', 'Legal Documents', 'background'),

    # Project documents
    _p(['accommodation schedule', 'unit schedule', 'unit mix'], 'Accommodation Schedule', 'Project Documents',
       'background'),
    _p(['build programme', 'construction programme', 'gantt', 'project timeline'], 'Build Programme',
       'Project Documents', 'credit_submission'),
    _p(['specification', 'spec', 'construction spec'], 'Specification', 'Project Documents', 'background'),
    _p(['tender', 'bid', 'contractor tender', 'quotation'], 'Tender', 'Project Documents', 'credit_submission'),
    _p(['cgi', 'render', 'renders', 'visualisation', 'visualization'], 'CGI/Renders', 'Project Documents',
       'background'),

    # Financial documents
    _p(['loan statement', 'facility statement'], 'Loan Statement', 'Financial Documents', 'post_completion'),
    _p(['redemption statement', 'payoff statement', 'settlement figure'], 'Redemption Statement',
       'Financial Documents', 'post_completion'),
    _p(['completion statement', 'closing statement'], 'Completion Statement', 'Financial Documents',
       'post_completion'),
    _p(['invoice', 'inv '], 'Invoice', 'Financial Documents', 'credit_submission',
       ['template', 'guide', 'blank', 'sample', 'example']),
    _p(['receipt', 'payment receipt'], 'Receipt', 'Financial Documents', 'credit_submission'),

    # Insurance
    _p(['insurance policy', 'policy document'], 'Insurance Policy', 'Insurance', 'credit_submission'),
    _p(['insurance certificate', 'certificate of insurance', 'coi'], 'Insurance Certificate', 'Insurance',
       'credit_submission'),

    # Communications (client level)
    _p(['email', 'correspondence', 're:', 'fwd:'], 'Email/Correspondence', 'Communications', 'background_docs'),
    _p(['meeting minutes', 'minutes', 'meeting notes'], 'Meeting Minutes', 'Communications', 'notes'),

    # Warranties
    _p(['nhbc', 'buildmark', 'new home warranty'], 'NHBC Warranty', 'Warranties', 'post_completion'),
    _p(['latent defects', 'ldi', 'structural warranty', 'defects insurance'], 'Latent Defects Insurance',
       'Warranties', 'post_completion'),

    # Photographs
    _p(['photo', 'photograph', 'site photo', 'progress photo'], 'Site Photographs', 'Photographs', 'background'),
]

CHECKLIST_PATTERN_ALIASES = {
    'proof of address': ['poa', 'proof of address', 'proofofaddress', 'address proof', 'utility', 'utility bill',
                         'bank statement'],
    'proof of id': ['poi', 'proof of id', 'proofofid', 'id proof', 'passport', 'drivers license', 'driving license',
                    'id doc', 'identification', 'biodata', 'id card', 'national id'],
    'bank statement': ['bank statement', 'bankstatement', 'bank', 'statement', 'bs'],
    'assets & liabilities': ['assets', 'liabilities', 'a&l', 'al statement', 'assets and liabilities', 'net worth'],
    'track record': ['track record', 'trackrecord', 'cv', 'resume', 'experience', 'portfolio'],
    'appraisal': ['appraisal', 'feasibility', 'development appraisal', 'da'],
    'valuation': ['valuation', 'val', 'red book', 'redbook', 'rics'],
    'floorplan': ['floorplan', 'floor plan', 'floorplans', 'floor plans', 'fp'],
    'elevation': ['elevation', 'elevations', 'elev'],
    'site plan': ['site plan', 'siteplan', 'sp', 'site layout'],
    'planning': ['planning', 'planning decision', 'planning permission', 'pp'],
    'monitoring': ['monitoring', 'ims', 'monitoring report', 'ms report'],
    'personal guarantee': ['pg', 'personal guarantee', 'guarantee'],
    'facility': ['facility', 'facility letter', 'fa', 'loan agreement'],
    'debenture': ['debenture', 'deb'],
    'share charge': ['share charge', 'sharecharge', 'sc'],
}
