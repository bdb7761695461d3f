# ============================================================================
# TEST 2: Taxonomy Constants
# ============================================================================

def test_constants():
    """Test taxonomy defaults are loaded and consistent"""
    print("=" * 70)
    print("TEST 2: Taxonomy Constants")
    print("=" * 70)

    from src.document_filing.constants import (
        OTHER, MISCELLANEOUS_FOLDER, DEFAULT_FILE_TYPES, DEFAULT_CATEGORIES,
        DEFAULT_FOLDERS, CATEGORY_FOLDER_MAP, TYPE_ABBREVIATIONS,
        FILENAME_PATTERNS, CHECKLIST_PATTERN_ALIASES
    )

    print(f"✓ File types loaded: {len(DEFAULT_FILE_TYPES)}")
    print(f"✓ Categories loaded: {len(DEFAULT_CATEGORIES)}")
    print(f"✓ Folders loaded: {len(DEFAULT_FOLDERS)}")

    assert OTHER in DEFAULT_FILE_TYPES
    assert OTHER in DEFAULT_CATEGORIES
    assert len(set(DEFAULT_FILE_TYPES)) == len(DEFAULT_FILE_TYPES), "Duplicate file type"

    folder_keys = {f["folder_key"] for f in DEFAULT_FOLDERS}
    assert MISCELLANEOUS_FOLDER in folder_keys

    for category, target in CATEGORY_FOLDER_MAP.items():
        assert category in DEFAULT_CATEGORIES, f"Unknown category {category}"
        assert target["folder"] in folder_keys, f"Unknown folder {target['folder']}"
    print(f"✓ Category folder map points at known folders")

    assert set(TYPE_ABBREVIATIONS) == set(DEFAULT_CATEGORIES)
    print(f"✓ Every category has an abbreviation")

    for pattern in FILENAME_PATTERNS:
        assert pattern["folder"] in folder_keys, pattern["folder"]
        assert pattern["keywords"], pattern["file_type"]
    print(f"✓ Filename patterns loaded: {len(FILENAME_PATTERNS)}")
    print(f"✓ Checklist aliases loaded: {len(CHECKLIST_PATTERN_ALIASES)}")

    print("\n✅ Constants test PASSED\n")


def test_type_abbreviation():
    from src.document_filing.constants import get_type_abbreviation

    assert get_type_abbreviation("KYC") == "KYC"
    assert get_type_abbreviation("Legal Documents") == "LEG"
    assert get_type_abbreviation("Unheard Of") == "DOC"
