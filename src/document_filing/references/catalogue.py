# ============================================================================
# src/document_filing/references/catalogue.py
# ============================================================================
"""
Built-in Reference Catalogue

A compact default library, one or two entries per category. Hosts normally
supply their own entries through init_registry(); these keep the pipeline
useful out of the box and give the tests realistic data.
"""

_ALL_CONTEXTS = ["classification", "summarization", "filing", "checklist", "chat"]


def _tags(type_tag, domain, signals=(), triggers=(), contexts=("classification", "filing", "checklist")):
    tags = [{"namespace": "type", "value": type_tag, "weight": 2.0}]
    tags.append({"namespace": "domain", "value": domain, "weight": 1.0})
    tags.extend({"namespace": "signal", "value": s, "weight": 1.5} for s in signals)
    tags.extend({"namespace": "trigger", "value": t, "weight": 1.2} for t in triggers)
    tags.extend({"namespace": "context", "value": c, "weight": 1.0} for c in contexts)
    return tags


def _ref(ref_id, file_type, category, folder, level, description, rules, tags, keywords,
         filename_patterns, exclude_patterns=(), decision_rules=(), disambiguation=(),
         terminology=None, contexts=None):
    return {
        "id": ref_id,
        "file_type": file_type,
        "category": category,
        "filing": {"target_folder": folder, "target_level": level},
        "description": description,
        "identification_rules": list(rules),
        "disambiguation": list(disambiguation),
        "terminology": terminology or {},
        "tags": tags,
        "keywords": list(keywords),
        "filename_patterns": list(filename_patterns),
        "exclude_patterns": list(exclude_patterns),
        "decision_rules": list(decision_rules),
        "applicable_contexts": contexts or list(_ALL_CONTEXTS),
    }


BUILTIN_REFERENCES = [
    # KYC
    _ref(
        "passport", "Passport", "KYC", "kyc", "client",
        "Government-issued photographic identity document used for borrower, guarantor "
        "and beneficial-owner identity checks.\n\nCopies should show the full photo page "
        "including the machine-readable zone.",
        [
            "PRIMARY: Full-page photograph alongside name, date of birth and nationality",
            "CRITICAL: Machine-readable zone (two chevron-delimited lines) on the photo page",
            "Passport number, issue date, expiry date and issuing authority",
        ],
        _tags("passport", "kyc", signals=["identity-photo", "mrz-detected"], triggers=["identity+government"]),
        ["passport", "mrz", "machine readable zone", "nationality", "passport number",
         "date of birth", "issuing authority", "travel document", "photo page"],
        ["passport", "pport", r"bio[_\-\s]?data"],
        ["driving", "licence", "license", "utility", r"bank[_\-\s]?statement"],
        decision_rules=[
            {"condition": "MRZ zone and full-page photo present", "signals": ["mrz-detected", "photo-page"],
             "priority": 9, "action": "require"},
            {"condition": "Filename mentions passport", "signals": ["filename-passport"],
             "priority": 7, "action": "boost"},
        ],
        disambiguation=["This is a Passport, NOT a Driving License: it carries an MRZ and ICAO layout."],
        terminology={"MRZ": "Machine Readable Zone at the foot of the photo page"},
    ),
    _ref(
        "driving-license", "Driving License", "KYC", "kyc", "client",
        "Photocard driving licence accepted as secondary photographic identity and, "
        "for UK licences, as proof of address.",
        [
            "PRIMARY: DVLA photocard layout with numbered fields 1-9",
            "Licence number, categories of entitlement and expiry date",
        ],
        _tags("driving-license", "kyc", signals=["identity-photo"]),
        ["driving licence", "driving license", "dvla", "licence number", "photocard",
         "entitlement", "categories"],
        [r"driv(ing|ers)?[_\-\s]?licen[cs]e", "dvla"],
        ["passport", "software", "template"],
        disambiguation=["This is a Driving License, NOT a Passport: no MRZ, DVLA card format."],
    ),
    _ref(
        "utility-bill", "Utility Bill", "KYC", "kyc", "client",
        "Recent gas, electricity, water or council-tax bill used as proof of residential address.",
        ["PRIMARY: Supplier branding with account holder name and service address",
         "Billing period dated within the last three months"],
        _tags("utility-bill", "kyc", signals=["proof-of-address"]),
        ["utility bill", "electricity", "gas", "water", "council tax", "account number",
         "billing period", "meter reading", "supply address"],
        [r"utility[_\-\s]?bill", "council[_\-\s]?tax", r"(gas|electric|water)[_\-\s]?bill"],
        [r"bank[_\-\s]?statement"],
    ),
    _ref(
        "bank-statement", "Bank Statement", "KYC", "kyc", "client",
        "Statement of account showing transactions and balances, used for proof of funds "
        "and proof of address.",
        ["PRIMARY: Bank branding, sort code and account number",
         "Dated transaction list with running balance"],
        _tags("bank-statement", "kyc", signals=["financial-tables", "proof-of-address"],
              triggers=["financial+identity"]),
        ["bank statement", "sort code", "account number", "balance", "opening balance",
         "closing balance", "transactions", "statement period"],
        [r"bank[_\-\s]?statement", r"\bstmt\b"],
        ["loan", "redemption", "completion"],
        disambiguation=["This is a Bank Statement, NOT a Loan Statement: it covers a current or savings account."],
    ),
    _ref(
        "track-record", "Track Record", "KYC", "kyc", "client",
        "Schedule of a developer's previous projects, with costs, sale values and profit, "
        "used to assess experience.",
        ["PRIMARY: Table listing several completed developments",
         "Columns for GDV, build cost, profit or completion date"],
        _tags("track-record", "kyc", signals=["multiple-projects"], triggers=["financial+multiple-projects"]),
        ["track record", "previous projects", "completed developments", "experience",
         "portfolio", "gdv", "units delivered"],
        [r"track[_\-\s]?record", r"\bcv\b", "portfolio"],
    ),

    # Appraisals
    _ref(
        "appraisal", "Appraisal", "Appraisals", "appraisals", "project",
        "Development appraisal showing gross development value, costs and residual profit.",
        ["PRIMARY: GDV, total costs and profit on cost", "Finance cost and contingency lines"],
        _tags("appraisal", "property-finance", signals=["financial-tables"]),
        ["appraisal", "gdv", "gross development value", "profit on cost", "residual",
         "build costs", "contingency", "finance costs"],
        ["appraisal", r"\bargus\b"],
        ["valuation", "redbook"],
    ),
    _ref(
        "redbook-valuation", "RedBook Valuation", "Appraisals", "appraisals", "project",
        "RICS Red Book valuation report prepared by a registered valuer for lending purposes.",
        ["PRIMARY: RICS branding and reference to the Red Book global standards",
         "CRITICAL: Market value opinion with valuation date",
         "Valuer signature and registration number"],
        _tags("redbook-valuation", "property-finance", signals=["rics-branding"]),
        ["rics", "red book", "market value", "valuation", "valuer", "special assumptions",
         "comparable evidence", "valuation date"],
        [r"red[_\-\s]?book", "valuation", r"\bval\b"],
        ["appraisal"],
        decision_rules=[
            {"condition": "RICS branding detected", "signals": ["rics-branding"], "priority": 8, "action": "boost"},
        ],
    ),

    # Plans
    _ref(
        "floor-plans", "Floor Plans", "Plans", "background", "project",
        "Architectural drawings of each floor layout with room dimensions.",
        ["PRIMARY: Scaled drawing with room labels and dimensions", "Title block with drawing number and scale"],
        _tags("floor-plans", "construction", signals=["architectural-drawing"]),
        ["floor plan", "ground floor", "first floor", "scale", "drawing number", "gia", "layout"],
        [r"floor[_\-\s]?plan", r"\bgf\b", r"\bff\b"],
        ["elevation", "section"],
    ),

    # Professional Reports
    _ref(
        "monitoring-report", "Interim Monitoring Report", "Professional Reports", "credit_submission", "project",
        "Periodic report from the lender's monitoring surveyor on build progress, cost to complete and drawdown.",
        ["PRIMARY: Progress against programme and cost to complete",
         "Drawdown recommendation"],
        _tags("interim-monitoring-report", "construction", signals=["site-visit"]),
        ["monitoring report", "monitoring surveyor", "cost to complete", "drawdown",
         "progress", "site visit", "programme"],
        [r"\bims\b", r"monitoring[_\-\s]?report", r"\bmr\d*\b"],
        ["initial"],
    ),

    # Loan Terms
    _ref(
        "indicative-terms", "Indicative Terms", "Loan Terms", "terms_comparison", "project",
        "Non-binding heads of terms setting out proposed loan amount, rate, fees and conditions.",
        ["PRIMARY: Loan amount, interest rate, arrangement and exit fees",
         "Marked indicative or subject to credit"],
        _tags("indicative-terms", "property-finance", signals=["loan-terms"]),
        ["indicative terms", "heads of terms", "term sheet", "arrangement fee", "exit fee",
         "ltv", "ltgdv", "interest rate", "subject to credit"],
        [r"term[_\-\s]?sheet", r"\bhots?\b", r"indicative[_\-\s]?terms"],
        ["facility"],
    ),

    # Legal Documents
    _ref(
        "facility-letter", "Facility Letter", "Legal Documents", "background", "project",
        "Binding loan agreement between lender and borrower.",
        ["PRIMARY: Parties, facility amount, repayment and events of default",
         "Execution blocks for lender and borrower"],
        _tags("facility-letter", "legal", signals=["legal-clauses"], triggers=["financial+legal"]),
        ["facility letter", "facility agreement", "borrower", "lender", "events of default",
         "repayment date", "conditions precedent"],
        [r"facility[_\-\s]?(letter|agreement)"],
        ["indicative", "term sheet"],
    ),
    _ref(
        "personal-guarantee", "Personal Guarantee", "Legal Documents", "background", "project",
        "Guarantee given by an individual for the borrower's obligations.",
        ["PRIMARY: Guarantor undertakes to pay on demand", "Signed as a deed"],
        _tags("personal-guarantee", "legal", signals=["legal-clauses"]),
        ["guarantee", "guarantor", "indemnity", "on demand", "deed", "guaranteed liabilities"],
        [r"\bpg\b", r"personal[_\-\s]?guarantee"],
        ["corporate"],
    ),

    # Financial Documents
    _ref(
        "invoice", "Invoice", "Financial Documents", "operational_model", "project",
        "Request for payment from a contractor or consultant.",
        ["PRIMARY: Invoice number, date and amount due", "Supplier VAT number"],
        _tags("invoice", "property-finance", signals=["financial-tables"]),
        ["invoice", "invoice number", "amount due", "vat", "payment terms", "remittance"],
        [r"\binv\b", "invoice"],
        ["receipt"],
    ),

    # Insurance
    _ref(
        "insurance-policy", "Insurance Policy", "Insurance", "credit_submission", "project",
        "Policy schedule and wording for buildings, contract works or liability cover.",
        ["PRIMARY: Policy number, insured party, period of insurance and sum insured"],
        _tags("insurance-policy", "insurance"),
        ["policy schedule", "insured", "sum insured", "period of insurance", "premium", "insurer"],
        [r"insurance[_\-\s]?policy", r"policy[_\-\s]?schedule"],
        ["certificate"],
    ),

    # Communications
    _ref(
        "correspondence", "Email/Correspondence", "Communications", "background_docs", "client",
        "Emails and letters exchanged with the client, brokers or advisers.",
        ["PRIMARY: From/To/Subject headers or letter salutation"],
        _tags("email-correspondence", "general", signals=["email-headers"]),
        ["email", "from", "subject", "dear", "regards", "correspondence"],
        [r"\bemail\b", r"\bletter\b", r"re[_\-\s]"],
        contexts=["classification", "filing", "chat"],
    ),

    # Warranties
    _ref(
        "nhbc-warranty", "NHBC Warranty", "Warranties", "post_completion", "project",
        "New-home structural warranty certificate issued on completion.",
        ["PRIMARY: NHBC Buildmark or equivalent branding with plot details"],
        _tags("nhbc-warranty", "construction"),
        ["nhbc", "buildmark", "structural warranty", "plot", "cover note"],
        ["nhbc", "buildmark"],
    ),
]
